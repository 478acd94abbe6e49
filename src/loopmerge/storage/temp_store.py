"""Temporary file lifecycle management."""

import logging
import time
import uuid
from pathlib import Path

from loopmerge.config import get_settings

logger = logging.getLogger(__name__)


def remove_path(path: Path) -> bool:
    """Delete a file if present. Returns False only when deletion failed."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)
        return False
    return True


class ArtifactScope:
    """Paths created for one request, removed when the scope closes.

    Paths marked with ``retain`` survive; everything else registered is
    deleted on exit, whether the block finished or raised.
    """

    def __init__(self):
        self._registered: list[Path] = []
        self._retained: set[Path] = set()

    def __enter__(self) -> "ArtifactScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def register(self, path: Path | str) -> Path:
        path = Path(path)
        if path not in self._registered:
            self._registered.append(path)
        return path

    def retain(self, path: Path | str) -> None:
        self._retained.add(Path(path))

    @property
    def registered(self) -> list[Path]:
        return list(self._registered)

    def release(self) -> None:
        """Remove every registered path that was not retained."""
        for path in self._registered:
            if path in self._retained:
                continue
            remove_path(path)
        self._registered = [p for p in self._registered if p in self._retained]


class TempArtifactManager:
    """Owns the upload and output directories and the names of files in them."""

    def __init__(
        self,
        upload_dir: Path | None = None,
        output_dir: Path | None = None,
        unique_filenames: bool | None = None,
    ):
        settings = get_settings()
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.output_dir = Path(output_dir or settings.output_dir)
        self.unique_filenames = (
            settings.unique_filenames if unique_filenames is None else unique_filenames
        )
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def scope(self) -> ArtifactScope:
        """Open a cleanup scope for one request."""
        return ArtifactScope()

    def build_filename(self, prefix: str, original_filename: str) -> str:
        """``<prefix>-<millis>-<name>``, with a random token after the timestamp when enabled."""
        name = Path(original_filename).name
        millis = int(time.time() * 1000)
        parts = [prefix, str(millis)] if prefix else [str(millis)]
        if self.unique_filenames:
            parts.append(uuid.uuid4().hex[:8])
        parts.append(name)
        return "-".join(parts)

    def upload_path(self, original_filename: str) -> Path:
        return self.upload_dir / self.build_filename("", original_filename)

    def output_path(self, prefix: str, original_filename: str) -> Path:
        return self.output_dir / self.build_filename(prefix, original_filename)

    def resolve_output(self, filename: str) -> Path | None:
        """Path of an existing output file, or None for unknown or unsafe names."""
        if not filename or Path(filename).name != filename:
            return None
        path = self.output_dir / filename
        if not path.is_file():
            return None
        return path
