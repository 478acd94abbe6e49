"""Data models for loopmerge."""

from loopmerge.models.errors import (
    DivisionError,
    ErrorResponse,
    LoopMergeError,
    NotFoundError,
    PipelineError,
    ProbeError,
    TranscodeError,
    ValidationError,
)
from loopmerge.models.media import MediaAsset, MediaKind
from loopmerge.models.pipeline import (
    MergeStatistics,
    PipelineRequest,
    PipelineState,
    SingleStageResult,
    SmartLoopMergeResult,
    StageResult,
)
from loopmerge.models.transcode import Artifact, ProgressUpdate, TranscodeInput, TranscodeSpec

__all__ = [
    "Artifact",
    "DivisionError",
    "ErrorResponse",
    "LoopMergeError",
    "MediaAsset",
    "MediaKind",
    "MergeStatistics",
    "NotFoundError",
    "PipelineError",
    "PipelineRequest",
    "PipelineState",
    "ProbeError",
    "ProgressUpdate",
    "SingleStageResult",
    "SmartLoopMergeResult",
    "StageResult",
    "TranscodeError",
    "TranscodeInput",
    "TranscodeSpec",
    "ValidationError",
]
