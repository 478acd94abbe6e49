"""Loop count calculation."""

import math

from loopmerge.models.errors import DivisionError


def compute_loop_count(audio_duration: float, video_duration: float) -> int:
    """Smallest number of plays of the video that covers the audio, at least 1."""
    if video_duration <= 0:
        raise DivisionError(
            f"Video duration must be positive, got {video_duration}",
            details={"audio_duration": audio_duration, "video_duration": video_duration},
        )
    return max(1, math.ceil(audio_duration / video_duration))
