"""Map TrimSilence errors onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from trimsilence.error_codes import ErrorCode
from trimsilence.exceptions import (
    ArtifactNotFoundError,
    FileTooLargeError,
    InvalidFileTypeError,
    NoFileUploadedError,
    TrimSilenceError,
    UploadValidationError,
)

logger = logging.getLogger("trimsilence.api")

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499

_TITLES: dict[type[TrimSilenceError], str] = {
    NoFileUploadedError: "No audio file uploaded",
    InvalidFileTypeError: "Invalid file type",
    FileTooLargeError: "File too large",
    ArtifactNotFoundError: "File not found",
}


class ClientDisconnected(Exception):
    """Raised when the client went away before processing finished."""


def error_body(error: str, message: str, code: ErrorCode | str) -> dict[str, str]:
    return {"error": error, "message": message, "code": str(getattr(code, "value", code))}


def status_for(exc: TrimSilenceError) -> int:
    if isinstance(exc, UploadValidationError):
        return 400
    if isinstance(exc, ArtifactNotFoundError):
        return 404
    return 500


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TrimSilenceError)
    async def _trimsilence_error(request: Request, exc: TrimSilenceError) -> JSONResponse:
        status = status_for(exc)
        title = _TITLES.get(type(exc), "Failed to process audio")
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content=error_body(title, exc.message, exc.error_code))

    @app.exception_handler(ClientDisconnected)
    async def _client_disconnected(request: Request, exc: ClientDisconnected) -> Response:  # noqa: ARG001
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("%s %s crashed", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "Failed to process audio", "An unexpected error occurred", ErrorCode.UNKNOWN
            ),
        )
