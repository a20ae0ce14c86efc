"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trimsilence.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")

_REPO_ROOT = Path(__file__).resolve().parents[3]

BITRATE_MODES = ("source", "fixed")

DEFAULT_ALLOWED_MIME_TYPES = (
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/wave",
    "audio/x-wav",
    "audio/mp4",
    "audio/m4a",
    "audio/x-m4a",
    "audio/ogg",
    "audio/webm",
    "audio/flac",
    "audio/x-flac",
    "audio/aac",
    "audio/x-aac",
)


class AudioConfig(BaseSettings):
    """Audio processing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUDIO_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "ffmpeg"
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"

    silence_threshold_db: float = -30.0
    min_silence_s: float = Field(default=0.5, gt=0)

    # "source" keeps the upload's bitrate, "fixed" re-encodes at 192k regardless of input.
    bitrate_mode: str = "source"
    min_bitrate_kbps: int = Field(default=32, ge=8)

    probe_timeout_s: float | None = Field(default=30.0, gt=0)
    transcode_timeout_s: float | None = Field(default=600.0, gt=0)

    @model_validator(mode="after")
    def _validate_mode(self) -> "AudioConfig":
        mode = str(self.bitrate_mode or "").strip().lower()
        if mode not in BITRATE_MODES:
            raise ConfigurationError(
                f"AUDIO_BITRATE_MODE must be one of {', '.join(BITRATE_MODES)} (got {self.bitrate_mode!r})"
            )
        self.bitrate_mode = mode
        return self


class CleanupConfig(BaseSettings):
    """Artifact lifecycle timings."""

    model_config = SettingsConfigDict(
        env_prefix="CLEANUP_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    input_delay_s: float = Field(default=5.0, ge=0)
    download_delay_s: float = Field(default=1.0, ge=0)
    stale_after_s: float = Field(default=3600.0, gt=0)
    sweep_on_startup: bool = True


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    uploads_dir: str = "./uploads"
    output_dir: str = "./output"
    log_dir: str = "./logs"

    upload_max_bytes: int = Field(default=100 * 1024 * 1024, ge=1)
    allowed_mime_types: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_MIME_TYPES))

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Client disconnect polling while a trim runs
    disconnect_poll_s: float = Field(default=0.5, gt=0)

    audio: AudioConfig = AudioConfig()
    cleanup: CleanupConfig = CleanupConfig()
    logging: LoggingSettings = LoggingSettings()

    def model_post_init(self, __context: Any) -> None:
        def _abs_dir(p: str) -> str:
            path = Path(p)
            if path.is_absolute():
                out = path
            else:
                out = (_REPO_ROOT / path).resolve()
            out.mkdir(parents=True, exist_ok=True)
            return str(out)

        # Relative paths always resolve under the repo root, whatever the CWD.
        self.uploads_dir = _abs_dir(self.uploads_dir)
        self.output_dir = _abs_dir(self.output_dir)
        self.log_dir = _abs_dir(self.log_dir)

    @property
    def allowed_mime_set(self) -> frozenset[str]:
        return frozenset(str(m).strip().lower() for m in self.allowed_mime_types if str(m).strip())
