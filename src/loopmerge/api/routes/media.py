"""Media processing endpoints."""

from fastapi import APIRouter, Depends, File, Form, UploadFile

from loopmerge.api.dependencies import get_app_settings, get_orchestrator, get_temp_store
from loopmerge.api.uploads import save_upload, validate_upload
from loopmerge.config import Settings
from loopmerge.models.errors import ValidationError
from loopmerge.models.media import MediaKind
from loopmerge.pipeline.orchestrator import PipelineOrchestrator
from loopmerge.storage.temp_store import TempArtifactManager

router = APIRouter(tags=["media"])


def _download_url(filename: str) -> str:
    return f"/download/{filename}"


def _parse_loops(loops: str | None, default: int) -> int:
    if loops is None or not loops.strip():
        return default
    try:
        return int(loops)
    except ValueError:
        raise ValidationError(
            f"loops must be a whole number, got {loops!r}", details={"loops": loops}
        )


def _require_pair(
    video: UploadFile | None, audio: UploadFile | None
) -> tuple[UploadFile, UploadFile]:
    if video is None or audio is None:
        raise ValidationError("Please upload both a video and an audio file")
    return video, audio


@router.post("/loop-video")
def loop_video(
    video: UploadFile | None = File(None),
    loops: str | None = Form(None),
    settings: Settings = Depends(get_app_settings),
    store: TempArtifactManager = Depends(get_temp_store),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Loop a video a fixed number of times."""
    if video is None:
        raise ValidationError("Please upload a video file")
    validate_upload(video, settings)
    count = _parse_loops(loops, settings.default_loops)

    with store.scope() as scope:
        asset = save_upload(video, MediaKind.VIDEO, store, scope, settings)
        result = orchestrator.loop_video(asset, count)

    return {
        "message": "Video looped successfully!",
        "outputFile": result.output_file,
        "downloadUrl": _download_url(result.output_file),
        "loops": result.loops,
    }


@router.post("/merge-audio")
def merge_audio(
    video: UploadFile | None = File(None),
    audio: UploadFile | None = File(None),
    settings: Settings = Depends(get_app_settings),
    store: TempArtifactManager = Depends(get_temp_store),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Merge an audio track onto a video."""
    video, audio = _require_pair(video, audio)
    validate_upload(video, settings)
    validate_upload(audio, settings)

    with store.scope() as scope:
        video_asset = save_upload(video, MediaKind.VIDEO, store, scope, settings)
        audio_asset = save_upload(audio, MediaKind.AUDIO, store, scope, settings)
        result = orchestrator.merge_audio(video_asset, audio_asset)

    return {
        "message": "Audio merged with video successfully!",
        "outputFile": result.output_file,
        "downloadUrl": _download_url(result.output_file),
    }


@router.post("/replace-audio")
def replace_audio(
    video: UploadFile | None = File(None),
    audio: UploadFile | None = File(None),
    settings: Settings = Depends(get_app_settings),
    store: TempArtifactManager = Depends(get_temp_store),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Replace the audio track of a video."""
    video, audio = _require_pair(video, audio)
    validate_upload(video, settings)
    validate_upload(audio, settings)

    with store.scope() as scope:
        video_asset = save_upload(video, MediaKind.VIDEO, store, scope, settings)
        audio_asset = save_upload(audio, MediaKind.AUDIO, store, scope, settings)
        result = orchestrator.replace_audio(video_asset, audio_asset)

    return {
        "message": "Audio in video replaced successfully!",
        "outputFile": result.output_file,
        "downloadUrl": _download_url(result.output_file),
    }


@router.post("/smart-loop-merge")
def smart_loop_merge(
    video: UploadFile | None = File(None),
    audio: UploadFile | None = File(None),
    settings: Settings = Depends(get_app_settings),
    store: TempArtifactManager = Depends(get_temp_store),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Loop a video until it covers the audio track, then merge them."""
    video, audio = _require_pair(video, audio)
    validate_upload(video, settings)
    validate_upload(audio, settings)

    with store.scope() as scope:
        video_asset = save_upload(video, MediaKind.VIDEO, store, scope, settings)
        audio_asset = save_upload(audio, MediaKind.AUDIO, store, scope, settings)
        result = orchestrator.smart_loop_merge(video_asset, audio_asset)

    stats = result.statistics
    return {
        "message": "Video looped and merged with audio successfully!",
        "outputFile": result.output_file,
        "downloadUrl": _download_url(result.output_file),
        "statistics": {
            "audioDuration": round(stats.audio_duration, 2),
            "videoDuration": round(stats.video_duration, 2),
            "requiredLoops": stats.required_loops,
            "finalDuration": round(stats.final_duration, 2),
        },
    }
