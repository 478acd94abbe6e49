"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class LoopMergeError(Exception):
    """Base error for all loopmerge errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class ValidationError(LoopMergeError):
    """Upload validation errors (missing file, format, size)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class NotFoundError(LoopMergeError):
    """A requested artifact does not exist."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="download", details=details)


class ProbeError(LoopMergeError):
    """Duration metadata could not be read from a media file."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="probing", details=details)


class DivisionError(LoopMergeError):
    """Loop count requested against a non-positive video duration."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="loop_count", details=details)


class TranscodeError(LoopMergeError):
    """An FFmpeg invocation failed or produced no output."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="transcoding", details=details)


class PipelineError(LoopMergeError):
    """Unexpected failures and illegal state transitions in the pipeline."""

    def __init__(self, message: str, component: str = "pipeline", details: dict | None = None):
        super().__init__(message, component=component, details=details)


class ErrorResponse(BaseModel):
    """Standardized error response for API."""

    error: str = Field(..., description="Human-readable summary shown to clients")
    error_type: str = Field(..., description="Error category")
    component: str = Field(default="", description="Component that raised the error")
    message: str = Field(..., description="Underlying error message")
    details: dict = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: LoopMergeError, summary: str = "") -> "ErrorResponse":
        return cls(
            error=f"{summary}: {exc.message}" if summary else exc.message,
            error_type=type(exc).__name__,
            component=exc.component,
            message=exc.message,
            details=exc.details,
        )
