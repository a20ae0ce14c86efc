"""Provider implementations."""

from trimsilence.providers.registry import get_audio_provider

__all__ = ["get_audio_provider"]
