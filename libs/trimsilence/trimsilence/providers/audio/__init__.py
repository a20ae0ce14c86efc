"""Audio processing Provider implementations."""

from trimsilence.providers.audio.base import AudioProvider, ProgressCallback
from trimsilence.providers.audio.encoding import select_encoding, target_bitrate_kbps
from trimsilence.providers.audio.ffmpeg import FFmpegProvider

__all__ = [
    "AudioProvider",
    "FFmpegProvider",
    "ProgressCallback",
    "select_encoding",
    "target_bitrate_kbps",
]
