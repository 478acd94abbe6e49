"""Media asset data models."""

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field


class MediaKind(StrEnum):
    """Role an uploaded file plays in a request."""

    VIDEO = "video"
    AUDIO = "audio"


class MediaAsset(BaseModel):
    """An uploaded file on disk and its probed duration."""

    path: str = Field(..., min_length=1, description="Location of the file on disk")
    kind: MediaKind
    duration_seconds: float = Field(default=0.0, ge=0, description="Probed duration in seconds")
    original_filename: str = Field(..., min_length=1, description="Client-supplied filename")

    @property
    def file(self) -> Path:
        return Path(self.path)
