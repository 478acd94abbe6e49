"""Property-based tests for upload validation."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from loopmerge.api.uploads import validate_content_type, validate_file_format
from loopmerge.config import Settings
from loopmerge.models.errors import ValidationError

pytestmark = pytest.mark.property

ALLOWED = Settings(_env_file=None).allowed_formats


class TestValidationProperties:
    @given(ext=st.sampled_from(ALLOWED), upper=st.booleans())
    @settings(max_examples=40)
    def test_allowed_formats_accepted(self, ext, upper):
        name = f"media.{ext.upper() if upper else ext}"
        validate_file_format(name, ALLOWED)

    @given(
        ext=st.text(min_size=1, max_size=5, alphabet="abcdefghijklmnopqrstuvwxyz0123456789").filter(
            lambda x: x not in ALLOWED
        )
    )
    @settings(max_examples=50)
    def test_other_formats_rejected(self, ext):
        with pytest.raises(ValidationError, match="Unsupported format"):
            validate_file_format(f"media.{ext}", ALLOWED)

    @given(
        main=st.sampled_from(["video", "audio"]),
        sub=st.sampled_from(["mp4", "mpeg", "webm", "x-wav", "ogg", "quicktime"]),
    )
    @settings(max_examples=30)
    def test_media_content_types_accepted(self, main, sub):
        validate_content_type(f"{main}/{sub}")

    @given(
        main=st.sampled_from(["text", "image", "application"]),
        sub=st.sampled_from(["plain", "png", "json"]),
    )
    @settings(max_examples=30)
    def test_other_content_types_rejected(self, main, sub):
        with pytest.raises(ValidationError, match="content type"):
            validate_content_type(f"{main}/{sub}")
