"""External transcode invoker — runs one FFmpeg process per call."""

import logging
import shlex
import subprocess
from collections import deque
from collections.abc import Callable, Iterator
from pathlib import Path

from loopmerge.config import get_settings
from loopmerge.models.errors import TranscodeError
from loopmerge.models.transcode import Artifact, ProgressUpdate, TranscodeSpec
from loopmerge.transcoding.command import build_command
from loopmerge.transcoding.progress import FFmpegProgressMonitor

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 30


class TranscodeRun:
    """Handle on a running FFmpeg process.

    ``progress()`` yields updates parsed from stderr as they arrive. The
    sequence is finite and can only be consumed once; ``wait()`` drains
    whatever is left before checking the exit status.
    """

    def __init__(self, spec: TranscodeSpec, command: list[str], process: subprocess.Popen):
        self.spec = spec
        self.command = command
        self.process = process
        self.monitor = FFmpegProgressMonitor(spec.expected_duration)
        self.stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        self.cancelled = False
        self._updates = self._read_updates()

    def _read_updates(self) -> Iterator[ProgressUpdate]:
        if self.process.stderr is None:
            return
        for line in self.process.stderr:
            self.stderr_tail.append(line)
            update = self.monitor.parse_line(line)
            if update is not None:
                yield update

    def progress(self) -> Iterator[ProgressUpdate]:
        """Progress updates for this run; not restartable."""
        return self._updates

    def cancel(self) -> None:
        """Kill the process; the run then fails with TranscodeError."""
        if self.process.poll() is None:
            self.cancelled = True
            self.process.kill()
            self.process.wait()

    def wait(self) -> Artifact:
        """Block until FFmpeg exits and return the artifact it wrote."""
        for _ in self._updates:
            pass
        returncode = self.process.wait()
        stderr_text = "".join(self.stderr_tail)

        if self.cancelled:
            raise TranscodeError(
                "FFmpeg process was cancelled",
                details={"output": self.spec.output_path},
            )
        if returncode != 0:
            message = f"FFmpeg exited with code {returncode}"
            if self.stderr_tail:
                message = f"{message}: {self.stderr_tail[-1].strip()}"
            logger.error("FFmpeg failed (code %d): %s", returncode, shlex.join(self.command))
            raise TranscodeError(
                message,
                details={"stderr": stderr_text, "output": self.spec.output_path},
            )

        output = Path(self.spec.output_path)
        if not output.exists():
            raise TranscodeError(
                "Output file was not created",
                details={"stderr": stderr_text, "output": str(output)},
            )
        return Artifact(path=str(output), size_bytes=output.stat().st_size)


class TranscodeInvoker:
    """Starts FFmpeg processes described by a TranscodeSpec."""

    def __init__(self, ffmpeg_binary: str | None = None):
        self.ffmpeg_binary = ffmpeg_binary or get_settings().ffmpeg_binary

    def start(self, spec: TranscodeSpec) -> TranscodeRun:
        """Spawn FFmpeg for ``spec`` without waiting for it."""
        Path(spec.output_path).parent.mkdir(parents=True, exist_ok=True)
        cmd = build_command(spec, self.ffmpeg_binary)
        logger.info("FFmpeg command: %s", shlex.join(cmd))

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except FileNotFoundError:
            raise TranscodeError(
                "FFmpeg not found. Please install FFmpeg.",
                details={"command": self.ffmpeg_binary},
            )
        except OSError as e:
            raise TranscodeError(f"Failed to start FFmpeg: {e}", details={"error": str(e)})
        return TranscodeRun(spec, cmd, process)

    def invoke(
        self,
        spec: TranscodeSpec,
        progress_callback: Callable[[ProgressUpdate], None] | None = None,
    ) -> Artifact:
        """Run FFmpeg to completion, reporting progress to ``progress_callback``."""
        run = self.start(spec)
        try:
            for update in run.progress():
                if progress_callback:
                    progress_callback(update)
        except BaseException:
            run.cancel()
            raise
        return run.wait()
