"""Canonical error codes surfaced to API clients."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    CONFIGURATION = "CONFIGURATION"

    NO_FILE_UPLOADED = "NO_FILE_UPLOADED"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    NO_AUDIO_STREAM = "NO_AUDIO_STREAM"
    PROBE_FAILED = "PROBE_FAILED"

    TRANSCODE_FAILED = "TRANSCODE_FAILED"
    OUTPUT_NOT_CREATED = "OUTPUT_NOT_CREATED"
    TIMEOUT = "TIMEOUT"

    FILE_NOT_FOUND = "FILE_NOT_FOUND"
