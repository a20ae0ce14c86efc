"""TrimSilence exception hierarchy."""

from __future__ import annotations

from trimsilence.error_codes import ErrorCode


class TrimSilenceError(Exception):
    """Base error for TrimSilence."""

    error_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, *, error_code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class ConfigurationError(TrimSilenceError):
    """Raised when configuration or inputs are invalid."""

    error_code = ErrorCode.CONFIGURATION


class UploadValidationError(TrimSilenceError):
    """Raised before any processing when an upload is rejected."""


class NoFileUploadedError(UploadValidationError):
    error_code = ErrorCode.NO_FILE_UPLOADED


class InvalidFileTypeError(UploadValidationError):
    error_code = ErrorCode.INVALID_FILE_TYPE


class FileTooLargeError(UploadValidationError):
    error_code = ErrorCode.FILE_TOO_LARGE

    def __init__(self, max_bytes: int) -> None:
        super().__init__(f"File too large (limit {max_bytes} bytes)")
        self.max_bytes = max_bytes


class ProbeError(TrimSilenceError):
    """Raised when media inspection fails. Non-fatal during trimming."""


class NoAudioStreamError(ProbeError):
    error_code = ErrorCode.NO_AUDIO_STREAM


class ProbeFailedError(ProbeError):
    error_code = ErrorCode.PROBE_FAILED


class ProcessingError(TrimSilenceError):
    """Raised when producing the trimmed output fails."""


class TranscodeFailedError(ProcessingError):
    error_code = ErrorCode.TRANSCODE_FAILED


class OutputNotCreatedError(ProcessingError):
    error_code = ErrorCode.OUTPUT_NOT_CREATED


class ToolTimeoutError(ProcessingError):
    """Raised when an external tool exceeds its time budget and was killed."""

    error_code = ErrorCode.TIMEOUT

    def __init__(self, tool: str, timeout_s: float) -> None:
        super().__init__(f"{tool} timed out after {timeout_s:g}s")
        self.tool = tool
        self.timeout_s = timeout_s


class ArtifactNotFoundError(TrimSilenceError):
    """Raised when an expected artifact is missing."""

    error_code = ErrorCode.FILE_NOT_FOUND
