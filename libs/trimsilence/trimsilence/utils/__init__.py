"""Utility helpers."""

from trimsilence.utils.ffmpeg import resolve_ffmpeg_bin, resolve_ffprobe_bin
from trimsilence.utils.subprocess import RunResult, run_subprocess

__all__ = [
    "RunResult",
    "resolve_ffmpeg_bin",
    "resolve_ffprobe_bin",
    "run_subprocess",
]
