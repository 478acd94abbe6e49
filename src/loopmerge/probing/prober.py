"""Duration probing with ffprobe."""

import json
import logging
import subprocess
from pathlib import Path

from loopmerge.config import get_settings
from loopmerge.models.errors import ProbeError
from loopmerge.models.media import MediaAsset

logger = logging.getLogger(__name__)


class MediaProber:
    """Reads container metadata without decoding the media."""

    def __init__(self, ffprobe_binary: str | None = None, timeout: int | None = None):
        settings = get_settings()
        self.ffprobe_binary = ffprobe_binary or settings.ffprobe_binary
        self.timeout = timeout if timeout is not None else settings.probe_timeout_seconds

    def probe_duration(self, file_path: Path) -> float:
        """Return the container duration of ``file_path`` in seconds.

        A file whose streams are valid but whose container carries no duration
        is reported as 0.0.
        """
        probe_data = self.run_ffprobe(Path(file_path))
        raw = probe_data.get("format", {}).get("duration")
        if raw in (None, "", "N/A"):
            logger.warning("No duration metadata in %s, assuming 0", file_path)
            return 0.0
        try:
            duration = float(raw)
        except (TypeError, ValueError):
            raise ProbeError(
                f"Unparseable duration {raw!r}",
                details={"file": str(file_path)},
            )
        return max(0.0, duration)

    def probe(self, asset: MediaAsset) -> MediaAsset:
        """Populate ``duration_seconds`` on an asset."""
        asset.duration_seconds = self.probe_duration(asset.file)
        logger.info("%s duration: %.3f seconds", asset.kind.value, asset.duration_seconds)
        return asset

    def run_ffprobe(self, file_path: Path) -> dict:
        """Run ffprobe and return its JSON report."""
        if not file_path.exists():
            raise ProbeError(f"File not found: {file_path}", details={"file": str(file_path)})
        try:
            result = subprocess.run(
                [
                    self.ffprobe_binary,
                    "-v",
                    "quiet",
                    "-print_format",
                    "json",
                    "-show_format",
                    "-show_streams",
                    str(file_path),
                ],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise ProbeError(
                "ffprobe not found. Please install FFmpeg.",
                details={"command": self.ffprobe_binary},
            )
        except subprocess.TimeoutExpired:
            raise ProbeError(
                "File probe timed out",
                details={"file": str(file_path), "timeout": self.timeout},
            )

        if result.returncode != 0:
            raise ProbeError(
                "File appears to be corrupted or unreadable",
                details={"file": str(file_path), "stderr": result.stderr[:500]},
            )
        try:
            probe_data = json.loads(result.stdout)
        except json.JSONDecodeError:
            raise ProbeError(
                "Failed to parse ffprobe output",
                details={"file": str(file_path)},
            )
        if not probe_data.get("streams"):
            raise ProbeError(
                "No media streams found in file",
                details={"file": str(file_path)},
            )
        return probe_data
