"""Provider factory and registry."""

from __future__ import annotations

from typing import Any
from collections.abc import Mapping

from trimsilence.exceptions import ConfigurationError
from trimsilence.providers.audio.base import AudioProvider


def get_audio_provider(config: Mapping[str, Any]) -> AudioProvider:
    """Get audio provider based on configuration."""
    provider_type = str(config.get("provider", "ffmpeg")).strip().lower()

    match provider_type:
        case "ffmpeg":
            from trimsilence.providers.audio.ffmpeg import FFmpegProvider

            return FFmpegProvider(
                ffmpeg_bin=str(config.get("ffmpeg_bin") or "ffmpeg"),
                ffprobe_bin=str(config.get("ffprobe_bin") or "ffprobe"),
                silence_threshold_db=float(config.get("silence_threshold_db", -30.0)),
                min_silence_s=float(config.get("min_silence_s", 0.5)),
                bitrate_mode=str(config.get("bitrate_mode") or "source"),
                min_bitrate_kbps=int(config.get("min_bitrate_kbps", 32)),
                probe_timeout_s=config.get("probe_timeout_s"),
                transcode_timeout_s=config.get("transcode_timeout_s"),
            )
        case _:
            raise ConfigurationError(f"Unknown audio provider: {provider_type}")
