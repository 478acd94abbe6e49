"""Shared test fixtures, fakes and test media generators."""

import math
import struct
import wave
from pathlib import Path

import pytest

from loopmerge.config import Settings
from loopmerge.models.errors import ProbeError, TranscodeError
from loopmerge.models.media import MediaAsset, MediaKind
from loopmerge.models.transcode import Artifact, ProgressUpdate, TranscodeSpec
from loopmerge.pipeline.orchestrator import PipelineOrchestrator
from loopmerge.storage.temp_store import TempArtifactManager


class FakeProber:
    """Returns canned durations per media kind instead of calling ffprobe."""

    def __init__(self, video: float = 5.0, audio: float = 12.0, fail: MediaKind | None = None):
        self.durations = {MediaKind.VIDEO: video, MediaKind.AUDIO: audio}
        self.fail = fail
        self.probed: list[str] = []

    def probe(self, asset: MediaAsset) -> MediaAsset:
        self.probed.append(asset.path)
        if asset.kind == self.fail:
            raise ProbeError("No media streams found in file", details={"file": asset.path})
        asset.duration_seconds = self.durations[asset.kind]
        return asset


class FakeInvoker:
    """Writes the declared output instead of running FFmpeg.

    ``outcomes`` is consumed one entry per call: ``"ok"`` writes the output,
    ``"fail"`` writes a partial output then raises TranscodeError, and an
    exception instance is raised as-is.
    """

    def __init__(self, outcomes: list | None = None):
        self.outcomes = list(outcomes or [])
        self.specs: list[TranscodeSpec] = []

    def invoke(self, spec: TranscodeSpec, progress_callback=None) -> Artifact:
        self.specs.append(spec)
        outcome = self.outcomes.pop(0) if self.outcomes else "ok"
        output = Path(spec.output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        if progress_callback:
            progress_callback(ProgressUpdate(percent=50.0, time_seconds=1.0))
            progress_callback(ProgressUpdate(percent=None, time_seconds=1.5))

        if isinstance(outcome, BaseException):
            raise outcome
        if outcome == "fail":
            output.write_bytes(b"partial")
            raise TranscodeError(
                "FFmpeg exited with code 1: Invalid data found when processing input",
                details={"output": str(output)},
            )
        output.write_bytes(b"media-bytes")
        return Artifact(path=str(output), size_bytes=output.stat().st_size)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at per-test upload and output directories."""
    return Settings(
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "outputs",
        _env_file=None,
    )


@pytest.fixture
def store(settings):
    return TempArtifactManager(
        upload_dir=settings.upload_dir,
        output_dir=settings.output_dir,
        unique_filenames=settings.unique_filenames,
    )


@pytest.fixture
def make_asset(store):
    """Create an uploaded file in the upload directory and return its asset."""

    def _make(kind: MediaKind, filename: str, content: bytes = b"upload") -> MediaAsset:
        path = store.upload_path(filename)
        path.write_bytes(content)
        return MediaAsset(path=str(path), kind=kind, original_filename=filename)

    return _make


@pytest.fixture
def video_asset(make_asset):
    return make_asset(MediaKind.VIDEO, "clip.mp4")


@pytest.fixture
def audio_asset(make_asset):
    return make_asset(MediaKind.AUDIO, "track.mp3")


@pytest.fixture
def build_orchestrator(store):
    """Orchestrator wired to fakes and the per-test directories."""

    def _build(prober: FakeProber | None = None, invoker: FakeInvoker | None = None):
        return PipelineOrchestrator(
            store=store,
            prober=prober or FakeProber(),
            invoker=invoker or FakeInvoker(),
            audio_codec="aac",
        )

    return _build


def generate_test_wav(
    path: Path, duration: float = 1.0, sample_rate: int = 22050, freq: float = 440.0
) -> Path:
    """Generate a simple test WAV file with a sine wave."""
    n_samples = int(duration * sample_rate)
    with wave.open(str(path), "w") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        frames = bytearray()
        for i in range(n_samples):
            t = i / sample_rate
            sample = int(32767 * 0.5 * math.sin(2 * math.pi * freq * t))
            frames += struct.pack("<h", sample)
        wav.writeframes(bytes(frames))
    return path


@pytest.fixture
def make_wav():
    return generate_test_wav
