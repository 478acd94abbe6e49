"""FFmpeg command construction."""

import math
from pathlib import Path

from loopmerge.models.transcode import TranscodeInput, TranscodeSpec


def format_seconds(seconds: float) -> str:
    """Millisecond precision, rounded up so a positive duration never renders as zero."""
    millis = max(1, math.ceil(round(seconds * 1000, 6)))
    return f"{millis // 1000}.{millis % 1000:03d}"


def build_command(spec: TranscodeSpec, binary: str = "ffmpeg") -> list[str]:
    """Render a spec as an FFmpeg argument list."""
    cmd = [binary, "-y"]
    for item in spec.inputs:
        if item.stream_loop > 0:
            cmd.extend(["-stream_loop", str(item.stream_loop)])
        cmd.extend(["-i", item.path])

    if spec.codec:
        cmd.extend(["-c", spec.codec])
    if spec.video_codec:
        cmd.extend(["-c:v", spec.video_codec])
    if spec.audio_codec:
        cmd.extend(["-c:a", spec.audio_codec])
    for selector in spec.maps:
        cmd.extend(["-map", selector])
    if spec.duration is not None:
        cmd.extend(["-t", format_seconds(spec.duration)])
    if spec.shortest:
        cmd.append("-shortest")
    if spec.normalize_timestamps:
        cmd.extend(["-avoid_negative_ts", "make_zero"])

    cmd.append(spec.output_path)
    return cmd


def loop_spec(
    video_path: Path,
    output_path: Path,
    loop_count: int,
    video_duration: float | None = None,
) -> TranscodeSpec:
    """Play the video ``loop_count`` times in a row, copying streams unchanged."""
    expected = video_duration * loop_count if video_duration else None
    return TranscodeSpec(
        inputs=[TranscodeInput(path=str(video_path), stream_loop=max(0, loop_count - 1))],
        output_path=str(output_path),
        codec="copy",
        expected_duration=expected,
    )


def merge_trimmed_spec(
    video_path: Path,
    audio_path: Path,
    output_path: Path,
    duration: float | None,
    audio_codec: str = "aac",
) -> TranscodeSpec:
    """Put the audio under the video and cut the result to ``duration`` seconds."""
    return TranscodeSpec(
        inputs=[TranscodeInput(path=str(video_path)), TranscodeInput(path=str(audio_path))],
        output_path=str(output_path),
        video_codec="copy",
        audio_codec=audio_codec,
        maps=["0:v:0", "1:a:0"],
        duration=duration,
        normalize_timestamps=True,
        expected_duration=duration,
    )


def merge_audio_spec(
    video_path: Path, audio_path: Path, output_path: Path, audio_codec: str = "aac"
) -> TranscodeSpec:
    """Merge the first audio stream onto the first video stream, ending with the shorter."""
    return TranscodeSpec(
        inputs=[TranscodeInput(path=str(video_path)), TranscodeInput(path=str(audio_path))],
        output_path=str(output_path),
        video_codec="copy",
        audio_codec=audio_codec,
        maps=["0:v:0", "1:a:0"],
        shortest=True,
    )


def replace_audio_spec(
    video_path: Path, audio_path: Path, output_path: Path, audio_codec: str = "aac"
) -> TranscodeSpec:
    """Keep every video stream and swap all audio streams for the new track."""
    return TranscodeSpec(
        inputs=[TranscodeInput(path=str(video_path)), TranscodeInput(path=str(audio_path))],
        output_path=str(output_path),
        video_codec="copy",
        audio_codec=audio_codec,
        maps=["0:v", "1:a"],
        shortest=True,
    )
