"""FFmpeg progress monitoring."""

import re

from loopmerge.models.transcode import ProgressUpdate

TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+\.?\d*)")
DURATION_PATTERN = re.compile(r"Duration:\s*(\d+):(\d+):(\d+\.?\d*)")


def _to_seconds(match: re.Match) -> float:
    return int(match.group(1)) * 3600 + int(match.group(2)) * 60 + float(match.group(3))


class FFmpegProgressMonitor:
    """Turns FFmpeg stderr lines into progress updates.

    When no expected duration is known up front, the first ``Duration:``
    header FFmpeg prints for its inputs is used instead.
    """

    def __init__(self, total_duration: float | None = None):
        self.total_duration = total_duration or 0.0
        self.current_time = 0.0

    def parse_line(self, line: str) -> ProgressUpdate | None:
        """Parse an FFmpeg stderr line for time= progress."""
        if self.total_duration <= 0:
            header = DURATION_PATTERN.search(line)
            if header:
                self.total_duration = _to_seconds(header)
                return None

        match = TIME_PATTERN.search(line)
        if not match:
            return None
        self.current_time = _to_seconds(match)
        return ProgressUpdate(
            percent=self.percent,
            time_seconds=self.current_time,
            raw=line.strip(),
        )

    @property
    def percent(self) -> float | None:
        """Current progress in [0, 100], or None when the total is unknown."""
        if self.total_duration <= 0:
            return None
        return min(100.0, self.current_time / self.total_duration * 100.0)
