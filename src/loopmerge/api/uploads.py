"""Upload format and size validation, and persisting uploads to disk."""

import logging
from pathlib import Path

from fastapi import UploadFile

from loopmerge.config import Settings
from loopmerge.models.errors import ValidationError
from loopmerge.models.media import MediaAsset, MediaKind
from loopmerge.storage.temp_store import ArtifactScope, TempArtifactManager, remove_path

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
GENERIC_CONTENT_TYPES = {"application/octet-stream"}


def validate_file_format(filename: str, allowed_formats: list[str]) -> None:
    """Validate that file has an allowed extension."""
    ext = Path(filename).suffix.lstrip(".").lower()
    if ext not in allowed_formats:
        raise ValidationError(
            f"Unsupported format: .{ext}. Allowed: {allowed_formats}",
            details={"extension": ext, "allowed": allowed_formats},
        )


def validate_content_type(content_type: str | None) -> None:
    """Validate that the declared MIME type is a video or audio type."""
    if not content_type:
        return
    main_type = content_type.split(";")[0].strip().lower()
    if main_type.startswith(("video/", "audio/")) or main_type in GENERIC_CONTENT_TYPES:
        return
    raise ValidationError(
        f"Unsupported content type: {main_type}. Only video and audio files are accepted.",
        details={"content_type": main_type},
    )


def _size_error(size_bytes: int, max_mb: int) -> ValidationError:
    return ValidationError(
        f"File too large! Limit is {max_mb}MB.",
        details={"size_mb": round(size_bytes / (1024 * 1024), 1), "max_mb": max_mb},
    )


def validate_upload(file: UploadFile, settings: Settings) -> None:
    """Checks that need no disk I/O: name, extension, MIME type and declared size."""
    if not file.filename:
        raise ValidationError("No filename provided")
    validate_file_format(file.filename, settings.allowed_formats)
    validate_content_type(file.content_type)
    max_bytes = settings.upload_max_size_mb * 1024 * 1024
    if file.size is not None and file.size > max_bytes:
        raise _size_error(file.size, settings.upload_max_size_mb)


def save_upload(
    file: UploadFile,
    kind: MediaKind,
    store: TempArtifactManager,
    scope: ArtifactScope,
    settings: Settings,
) -> MediaAsset:
    """Stream an upload into the upload directory, enforcing the size limit."""
    validate_upload(file, settings)
    max_bytes = settings.upload_max_size_mb * 1024 * 1024
    file_path = scope.register(store.upload_path(file.filename))

    written = 0
    with open(file_path, "wb") as f:
        while chunk := file.file.read(CHUNK_SIZE):
            written += len(chunk)
            if written > max_bytes:
                break
            f.write(chunk)
    if written > max_bytes:
        remove_path(file_path)
        raise _size_error(written, settings.upload_max_size_mb)

    logger.info("Saved %s upload %s (%d bytes)", kind.value, file_path.name, written)
    return MediaAsset(path=str(file_path), kind=kind, original_filename=Path(file.filename).name)
