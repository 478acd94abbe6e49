"""Pipeline orchestrator: drives the smart loop-and-merge state machine."""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loopmerge.config import get_settings
from loopmerge.models.errors import (
    DivisionError,
    LoopMergeError,
    PipelineError,
    ProbeError,
    TranscodeError,
    ValidationError,
)
from loopmerge.models.media import MediaAsset
from loopmerge.models.pipeline import (
    MergeStatistics,
    PipelineRequest,
    PipelineState,
    SingleStageResult,
    SmartLoopMergeResult,
    StageResult,
)
from loopmerge.models.transcode import ProgressUpdate, TranscodeSpec
from loopmerge.pipeline.loop_count import compute_loop_count
from loopmerge.probing.prober import MediaProber
from loopmerge.storage.temp_store import ArtifactScope, TempArtifactManager, remove_path
from loopmerge.transcoding import command
from loopmerge.transcoding.invoker import TranscodeInvoker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, ProgressUpdate], None]


class PipelineOrchestrator:
    """Runs media operations against FFmpeg with guaranteed cleanup."""

    def __init__(
        self,
        store: TempArtifactManager | None = None,
        prober: MediaProber | None = None,
        invoker: TranscodeInvoker | None = None,
        audio_codec: str | None = None,
    ):
        self.store = store or TempArtifactManager()
        self.prober = prober or MediaProber()
        self.invoker = invoker or TranscodeInvoker()
        self.audio_codec = audio_codec or get_settings().merge_audio_codec

    def create_request(self, video: MediaAsset, audio: MediaAsset) -> PipelineRequest:
        """Allocate intermediate and output names for a new run."""
        return PipelineRequest(
            video=video,
            audio=audio,
            intermediate_path=str(self.store.output_path("temp-looped", video.original_filename)),
            output_path=str(self.store.output_path("smart-merged", video.original_filename)),
        )

    def smart_loop_merge(
        self,
        video: MediaAsset,
        audio: MediaAsset,
        progress_callback: ProgressCallback | None = None,
    ) -> SmartLoopMergeResult:
        """Loop ``video`` until it covers ``audio``, then merge the two.

        Strict ordering: probe → loop count → loop → merge. Uploads and the
        intermediate are always removed; the output survives only on success.
        """
        request = self.create_request(video, audio)
        transitions = (self._probe, self._compute_loops, self._loop, self._merge)

        with self.store.scope() as scope:
            scope.register(video.path)
            scope.register(audio.path)

            for transition in transitions:
                result = self._run_transition(transition, request, scope, progress_callback)
                if not result.ok:
                    self._fail(request, result.error)
                    raise result.error

            descriptor = self._describe(request)
            scope.retain(request.output_path)
            return descriptor

    def _run_transition(
        self,
        transition: Callable[..., StageResult],
        request: PipelineRequest,
        scope: ArtifactScope,
        progress_callback: ProgressCallback | None,
    ) -> StageResult:
        try:
            return transition(request, scope, progress_callback)
        except LoopMergeError as e:
            return StageResult.failure(e)
        except Exception as e:
            logger.exception("Unexpected error in state %s", request.state.value)
            return StageResult.failure(PipelineError(f"Pipeline failed: {e}"))

    def _probe(self, request: PipelineRequest, scope, progress_callback) -> StageResult:
        request.advance(PipelineState.PROBING)
        logger.info("Probing durations...")
        try:
            with ThreadPoolExecutor(max_workers=2) as pool:
                futures = [
                    pool.submit(self.prober.probe, request.video),
                    pool.submit(self.prober.probe, request.audio),
                ]
                for future in futures:
                    future.result()
        except ProbeError as e:
            return StageResult.failure(e)
        request.advance(PipelineState.PROBED)
        return StageResult.success()

    def _compute_loops(self, request: PipelineRequest, scope, progress_callback) -> StageResult:
        try:
            loop_count = compute_loop_count(
                request.audio.duration_seconds, request.video.duration_seconds
            )
        except DivisionError as e:
            return StageResult.failure(e)
        request.loop_count = loop_count
        logger.info("Video must loop %d times to cover the audio", loop_count)
        request.advance(PipelineState.LOOPING)
        return StageResult.success(loop_count)

    def _loop(
        self, request: PipelineRequest, scope: ArtifactScope, progress_callback
    ) -> StageResult:
        intermediate = scope.register(request.intermediate_path)
        spec = command.loop_spec(
            request.video.file,
            intermediate,
            request.loop_count,
            request.video.duration_seconds,
        )
        try:
            artifact = self.invoker.invoke(spec, self._reporter("loop", progress_callback))
        except TranscodeError as e:
            return StageResult.failure(e)
        logger.info("Video loop finished: %s", artifact.path)
        request.advance(PipelineState.LOOPED)
        return StageResult.success(artifact)

    def _merge(
        self, request: PipelineRequest, scope: ArtifactScope, progress_callback
    ) -> StageResult:
        request.advance(PipelineState.MERGING)
        output = scope.register(request.output_path)
        spec = command.merge_trimmed_spec(
            Path(request.intermediate_path),
            request.audio.file,
            output,
            duration=request.audio.duration_seconds or None,
            audio_codec=self.audio_codec,
        )
        try:
            artifact = self.invoker.invoke(spec, self._reporter("merge", progress_callback))
        except TranscodeError as e:
            return StageResult.failure(e)
        remove_path(Path(request.intermediate_path))
        logger.info("Smart loop and merge finished: %s", artifact.path)
        request.advance(PipelineState.COMPLETED)
        return StageResult.success(artifact)

    def _fail(self, request: PipelineRequest, error: LoopMergeError) -> None:
        logger.error("Pipeline failed in state %s: %s", request.state.value, error.message)
        request.error = error.message
        request.advance(PipelineState.FAILED)

    def _describe(self, request: PipelineRequest) -> SmartLoopMergeResult:
        output = Path(request.output_path)
        return SmartLoopMergeResult(
            output_file=output.name,
            output_path=str(output),
            statistics=MergeStatistics(
                audio_duration=request.audio.duration_seconds,
                video_duration=request.video.duration_seconds,
                required_loops=request.loop_count,
                final_duration=request.audio.duration_seconds,
            ),
        )

    # Single-stage operations

    def loop_video(
        self,
        video: MediaAsset,
        loops: int,
        progress_callback: ProgressCallback | None = None,
    ) -> SingleStageResult:
        """Play ``video`` ``loops`` times in a row without re-encoding."""

        def build(output: Path) -> TranscodeSpec:
            if loops < 1:
                raise ValidationError(
                    f"loops must be at least 1, got {loops}", details={"loops": loops}
                )
            return command.loop_spec(video.file, output, loops)

        result = self._run_single([video], "looped", build, "loop", progress_callback)
        result.loops = loops
        return result

    def merge_audio(
        self,
        video: MediaAsset,
        audio: MediaAsset,
        progress_callback: ProgressCallback | None = None,
    ) -> SingleStageResult:
        """Merge ``audio`` onto ``video``, stopping at the shorter of the two."""

        def build(output: Path) -> TranscodeSpec:
            return command.merge_audio_spec(video.file, audio.file, output, self.audio_codec)

        return self._run_single([video, audio], "merged", build, "merge", progress_callback)

    def replace_audio(
        self,
        video: MediaAsset,
        audio: MediaAsset,
        progress_callback: ProgressCallback | None = None,
    ) -> SingleStageResult:
        """Swap the audio of ``video`` for ``audio``."""

        def build(output: Path) -> TranscodeSpec:
            return command.replace_audio_spec(video.file, audio.file, output, self.audio_codec)

        return self._run_single([video, audio], "replaced", build, "replace", progress_callback)

    def _run_single(
        self,
        assets: list[MediaAsset],
        prefix: str,
        build_spec: Callable[[Path], TranscodeSpec],
        label: str,
        progress_callback: ProgressCallback | None,
    ) -> SingleStageResult:
        with self.store.scope() as scope:
            for asset in assets:
                scope.register(asset.path)
            output = scope.register(self.store.output_path(prefix, assets[0].original_filename))

            try:
                spec = build_spec(output)
                self.invoker.invoke(spec, self._reporter(label, progress_callback))
            except LoopMergeError:
                raise
            except Exception as e:
                logger.exception("Unexpected error during %s", label)
                raise PipelineError(f"Pipeline failed: {e}")

            logger.info("%s finished: %s", label.capitalize(), output)
            scope.retain(output)
            return SingleStageResult(output_file=output.name, output_path=str(output))

    @staticmethod
    def _reporter(
        stage: str, progress_callback: ProgressCallback | None
    ) -> Callable[[ProgressUpdate], None]:
        def report(update: ProgressUpdate) -> None:
            logger.debug("%s progress: %.0f%% done", stage.capitalize(), update.percent or 0)
            if progress_callback:
                progress_callback(stage, update)

        return report
