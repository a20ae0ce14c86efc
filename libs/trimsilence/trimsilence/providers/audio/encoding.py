"""Output codec/bitrate selection for the silence-removal transcode.

The silence filter forces a re-encode, so every transcode needs an explicit
codec. In "source" mode the upload's bitrate is preserved (floored at
`min_kbps`) so output size and quality track the input; "fixed" mode is the
older behaviour that always targets 192k.
"""

from __future__ import annotations

from pathlib import Path

from trimsilence.exceptions import ConfigurationError
from trimsilence.models.audio import AudioMetadata, EncodingPlan

MIN_TARGET_KBPS = 32
MP3_DEFAULT_KBPS = 128
AAC_DEFAULT_KBPS = 96
VORBIS_MAX_KBPS = 256
FIXED_KBPS = 192

_AAC_LC = ("-profile:a", "aac_low")

_MP3_EXTS = {".mp3", ".mpeg"}
_AAC_EXTS = {".m4a", ".mp4"}


def target_bitrate_kbps(
    metadata: AudioMetadata | None,
    *,
    min_kbps: int = MIN_TARGET_KBPS,
) -> int | None:
    """Source bitrate in kbps, floored at `min_kbps`; None when unknown."""
    if metadata is None or not metadata.bitrate:
        return None
    return max(int(min_kbps), int(metadata.bitrate) // 1000)


def _source_plan(ext: str, target: int | None) -> EncodingPlan:
    if ext in _MP3_EXTS:
        return EncodingPlan("libmp3lame", target or MP3_DEFAULT_KBPS)
    if ext in _AAC_EXTS:
        return EncodingPlan("aac", target or AAC_DEFAULT_KBPS, _AAC_LC)
    if ext == ".ogg":
        return EncodingPlan("libvorbis", min(target, VORBIS_MAX_KBPS) if target else None)
    if ext == ".wav":
        return EncodingPlan("pcm_s16le")
    return EncodingPlan("aac", target or AAC_DEFAULT_KBPS, _AAC_LC)


def _fixed_plan(ext: str) -> EncodingPlan:
    if ext in _MP3_EXTS:
        return EncodingPlan("libmp3lame", FIXED_KBPS)
    if ext == ".ogg":
        return EncodingPlan("libvorbis")
    if ext == ".wav":
        return EncodingPlan("pcm_s16le")
    return EncodingPlan("aac", FIXED_KBPS, _AAC_LC)


def select_encoding(
    output_path: str | Path,
    metadata: AudioMetadata | None = None,
    *,
    mode: str = "source",
    min_kbps: int = MIN_TARGET_KBPS,
) -> EncodingPlan:
    """Pick codec, bitrate and codec options from the output extension.

    | extension    | codec       | bitrate (source mode)              |
    |--------------|-------------|------------------------------------|
    | .mp3 / .mpeg | libmp3lame  | target, else 128k                  |
    | .m4a / .mp4  | aac (LC)    | target, else 96k                   |
    | .ogg         | libvorbis   | min(target, 256), else encoder default |
    | .wav         | pcm_s16le   | n/a                                |
    | other        | aac (LC)    | target, else 96k                   |
    """
    ext = Path(str(output_path)).suffix.lower()
    name = str(mode or "").strip().lower()
    if name == "source":
        return _source_plan(ext, target_bitrate_kbps(metadata, min_kbps=min_kbps))
    if name == "fixed":
        return _fixed_plan(ext)
    raise ConfigurationError(f"Unknown bitrate mode: {mode!r} (expected: source/fixed)")
