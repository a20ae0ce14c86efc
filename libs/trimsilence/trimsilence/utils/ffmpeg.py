"""Locate the ffmpeg and ffprobe executables.

Order: an explicit path, then PATH. ffmpeg alone can also come from the
`imageio-ffmpeg` wheel, which bundles no ffprobe.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import imageio_ffmpeg

logger = logging.getLogger(__name__)


def _find_executable(name: str) -> str | None:
    if Path(name).is_file():
        return name
    return shutil.which(name)


def bundled_ffmpeg() -> str | None:
    try:
        return str(imageio_ffmpeg.get_ffmpeg_exe())
    except RuntimeError as exc:
        logger.warning("imageio-ffmpeg has no usable binary: %s", exc)
        return None


def resolve_ffmpeg_bin(ffmpeg_bin: str = "ffmpeg") -> str:
    name = (ffmpeg_bin or "").strip() or "ffmpeg"
    found = _find_executable(name) or bundled_ffmpeg()
    if found is None:
        logger.warning("ffmpeg not found as %r; trims fail until AUDIO_FFMPEG_BIN is fixed", name)
        return name
    return found


def resolve_ffprobe_bin(ffprobe_bin: str = "ffprobe") -> str:
    name = (ffprobe_bin or "").strip() or "ffprobe"
    found = _find_executable(name)
    if found is None:
        logger.warning("ffprobe not found as %r; metadata falls back to defaults", name)
        return name
    return found
