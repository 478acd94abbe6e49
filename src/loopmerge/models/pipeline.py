"""Pipeline state, request and result models."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from loopmerge.models.errors import LoopMergeError, PipelineError
from loopmerge.models.media import MediaAsset

T = TypeVar("T")


class PipelineState(StrEnum):
    """States of the smart loop-and-merge pipeline."""

    RECEIVED = "received"
    PROBING = "probing"
    PROBED = "probed"
    LOOPING = "looping"
    LOOPED = "looped"
    MERGING = "merging"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({PipelineState.COMPLETED, PipelineState.FAILED})

ALLOWED_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.RECEIVED: frozenset({PipelineState.PROBING}),
    PipelineState.PROBING: frozenset({PipelineState.PROBED}),
    PipelineState.PROBED: frozenset({PipelineState.LOOPING}),
    PipelineState.LOOPING: frozenset({PipelineState.LOOPED}),
    PipelineState.LOOPED: frozenset({PipelineState.MERGING}),
    PipelineState.MERGING: frozenset({PipelineState.COMPLETED}),
    PipelineState.COMPLETED: frozenset(),
    PipelineState.FAILED: frozenset(),
}


class PipelineRequest(BaseModel):
    """One smart loop-and-merge execution."""

    video: MediaAsset
    audio: MediaAsset
    loop_count: int = Field(default=1, ge=1)
    intermediate_path: str
    output_path: str
    state: PipelineState = Field(default=PipelineState.RECEIVED)
    history: list[PipelineState] = Field(default_factory=lambda: [PipelineState.RECEIVED])
    error: str | None = None

    def advance(self, new_state: PipelineState) -> None:
        """Move to ``new_state``; FAILED is reachable from any non-terminal state."""
        if self.state in TERMINAL_STATES:
            raise PipelineError(
                f"Cannot leave terminal state {self.state.value}",
                details={"from": self.state.value, "to": new_state.value},
            )
        if new_state != PipelineState.FAILED and new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise PipelineError(
                f"Illegal transition {self.state.value} -> {new_state.value}",
                details={"from": self.state.value, "to": new_state.value},
            )
        self.state = new_state
        self.history.append(new_state)


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of a single pipeline transition."""

    value: T | None = None
    error: LoopMergeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: LoopMergeError) -> "StageResult[T]":
        return cls(error=error)


class MergeStatistics(BaseModel):
    """Durations reported back for a smart loop-and-merge run."""

    audio_duration: float = Field(..., ge=0)
    video_duration: float = Field(..., ge=0)
    required_loops: int = Field(..., ge=1)
    final_duration: float = Field(..., ge=0)


class SmartLoopMergeResult(BaseModel):
    """Result descriptor of a completed smart loop-and-merge run."""

    output_file: str
    output_path: str
    statistics: MergeStatistics


class SingleStageResult(BaseModel):
    """Result descriptor of a loop, merge or replace operation."""

    output_file: str
    output_path: str
    loops: int | None = None
