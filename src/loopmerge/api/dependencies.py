"""Dependency injection providers for FastAPI."""

from fastapi import Depends

from loopmerge.config import Settings, get_settings
from loopmerge.pipeline.orchestrator import PipelineOrchestrator
from loopmerge.probing.prober import MediaProber
from loopmerge.storage.temp_store import TempArtifactManager
from loopmerge.transcoding.invoker import TranscodeInvoker


def get_app_settings() -> Settings:
    return get_settings()


def get_temp_store(settings: Settings = Depends(get_app_settings)) -> TempArtifactManager:
    return TempArtifactManager(
        upload_dir=settings.upload_dir,
        output_dir=settings.output_dir,
        unique_filenames=settings.unique_filenames,
    )


def get_orchestrator(
    settings: Settings = Depends(get_app_settings),
    store: TempArtifactManager = Depends(get_temp_store),
) -> PipelineOrchestrator:
    return PipelineOrchestrator(
        store=store,
        prober=MediaProber(settings.ffprobe_binary, settings.probe_timeout_seconds),
        invoker=TranscodeInvoker(settings.ffmpeg_binary),
        audio_codec=settings.merge_audio_codec,
    )
