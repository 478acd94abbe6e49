"""End-to-end tests against real ffmpeg/ffprobe binaries."""

import shutil

import pytest

from loopmerge.models.errors import ProbeError
from loopmerge.models.media import MediaAsset, MediaKind
from loopmerge.pipeline.orchestrator import PipelineOrchestrator
from loopmerge.probing.prober import MediaProber
from loopmerge.transcoding.invoker import TranscodeInvoker

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
        reason="ffmpeg/ffprobe not installed",
    ),
]


def generate_test_video(path, duration=5.0, fps=10, width=160, height=120):
    """Write a short mp4 with a moving bar using OpenCV."""
    cv2 = pytest.importorskip("cv2")
    np = pytest.importorskip("numpy")

    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"mp4v"), fps, (width, height))
    for i in range(int(duration * fps)):
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        x = (i * 4) % width
        frame[:, x : x + 8] = (0, 200, 255)
        writer.write(frame)
    writer.release()
    return path


@pytest.fixture
def real_orchestrator(store):
    return PipelineOrchestrator(
        store=store, prober=MediaProber(), invoker=TranscodeInvoker(), audio_codec="aac"
    )


@pytest.fixture
def uploads(store, make_wav):
    video_path = generate_test_video(store.upload_path("clip.mp4"))
    audio_path = make_wav(store.upload_path("track.wav"), duration=12.0)
    video = MediaAsset(path=str(video_path), kind=MediaKind.VIDEO, original_filename="clip.mp4")
    audio = MediaAsset(path=str(audio_path), kind=MediaKind.AUDIO, original_filename="track.wav")
    return video, audio


class TestRealProbe:
    def test_probe_wav(self, tmp_path, make_wav):
        path = make_wav(tmp_path / "tone.wav", duration=2.0)
        assert MediaProber().probe_duration(path) == pytest.approx(2.0, abs=0.05)

    def test_probe_video(self, tmp_path):
        path = generate_test_video(tmp_path / "clip.mp4")
        assert MediaProber().probe_duration(path) == pytest.approx(5.0, abs=0.2)

    def test_probe_text_file(self, tmp_path):
        path = tmp_path / "notes.mp4"
        path.write_text("this is not media")
        with pytest.raises(ProbeError):
            MediaProber().probe_duration(path)


class TestRealSmartLoopMerge:
    def test_loops_and_trims_to_audio(self, real_orchestrator, uploads, store):
        video, audio = uploads
        updates = []
        result = real_orchestrator.smart_loop_merge(
            video, audio, progress_callback=lambda stage, update: updates.append(stage)
        )

        stats = result.statistics
        assert stats.required_loops == 3
        assert stats.audio_duration == pytest.approx(12.0, abs=0.05)
        assert MediaProber().probe_duration(result.output_path) == pytest.approx(12.0, abs=0.1)

        assert list(store.upload_dir.iterdir()) == []
        assert [p.name for p in store.output_dir.iterdir()] == [result.output_file]
        assert set(updates) <= {"loop", "merge"}

    def test_loop_video(self, real_orchestrator, uploads, store):
        video, _ = uploads
        result = real_orchestrator.loop_video(video, 2)
        assert result.loops == 2
        assert MediaProber().probe_duration(result.output_path) == pytest.approx(10.0, abs=0.3)

    def test_corrupt_video_fails_cleanly(self, real_orchestrator, store, make_wav):
        bad = store.upload_path("broken.mp4")
        bad.write_text("definitely not a video")
        audio_path = make_wav(store.upload_path("track.wav"), duration=1.0)
        video = MediaAsset(path=str(bad), kind=MediaKind.VIDEO, original_filename="broken.mp4")
        audio = MediaAsset(
            path=str(audio_path), kind=MediaKind.AUDIO, original_filename="track.wav"
        )

        with pytest.raises(ProbeError):
            real_orchestrator.smart_loop_merge(video, audio)
        assert list(store.upload_dir.iterdir()) == []
        assert list(store.output_dir.iterdir()) == []
