"""Application configuration using Pydantic BaseSettings."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loopmerge configuration loaded from environment variables."""

    model_config = {"env_prefix": "LOOPMERGE_", "env_file": ".env", "extra": "ignore"}

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Upload constraints
    upload_max_size_mb: int = 500
    allowed_formats: list[str] = [
        "mp4",
        "avi",
        "mov",
        "wmv",
        "flv",
        "webm",
        "mp3",
        "wav",
        "aac",
        "ogg",
    ]

    # Directories
    upload_dir: Path = Path("/tmp/loopmerge/uploads")
    output_dir: Path = Path("/tmp/loopmerge/outputs")

    # Naming
    unique_filenames: bool = True

    # External tools
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    probe_timeout_seconds: int | None = None

    # Processing
    default_loops: int = 3
    merge_audio_codec: str = "aac"


def get_settings() -> Settings:
    """Return a settings instance."""
    return Settings()
