"""Transcode invocation data models."""

from pathlib import Path

from pydantic import BaseModel, Field


class TranscodeInput(BaseModel):
    """One ``-i`` input of an FFmpeg invocation."""

    path: str = Field(..., min_length=1)
    stream_loop: int = Field(default=0, ge=0, description="Additional repetitions of the input")


class TranscodeSpec(BaseModel):
    """Everything needed to run one FFmpeg process."""

    inputs: list[TranscodeInput] = Field(..., min_length=1)
    output_path: str = Field(..., min_length=1)
    codec: str | None = Field(default=None, description="Codec applied to all streams")
    video_codec: str | None = None
    audio_codec: str | None = None
    maps: list[str] = Field(default_factory=list, description="Stream selectors, e.g. 0:v:0")
    duration: float | None = Field(default=None, gt=0, description="Trim output to seconds")
    shortest: bool = False
    normalize_timestamps: bool = False
    expected_duration: float | None = Field(
        default=None, ge=0, description="Expected output length, used for progress only"
    )


class ProgressUpdate(BaseModel):
    """A progress sample parsed from FFmpeg output."""

    percent: float | None = Field(default=None, ge=0, le=100)
    time_seconds: float = Field(default=0.0, ge=0)
    raw: str = ""


class Artifact(BaseModel):
    """A file successfully produced by FFmpeg."""

    path: str
    size_bytes: int = Field(..., ge=0)

    @property
    def file(self) -> Path:
        return Path(self.path)
