from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, TypeVar

from fastapi import HTTPException, Request, UploadFile

from errors import ClientDisconnected
from trimsilence.config import Settings
from trimsilence.models.artifact import StoredArtifact
from trimsilence.services import TrimService
from trimsilence.storage import LocalArtifactStore

logger = logging.getLogger("trimsilence.api")

T = TypeVar("T")


def settings(request: Request) -> Settings:
    settings_obj: Settings | None = getattr(request.app.state, "settings", None)
    if settings_obj is None:
        raise HTTPException(status_code=500, detail="settings not initialized")
    return settings_obj


def store(request: Request) -> LocalArtifactStore:
    store_obj: LocalArtifactStore | None = getattr(request.app.state, "store", None)
    if store_obj is None:
        raise HTTPException(status_code=500, detail="artifact store not initialized")
    return store_obj


def trim_service(request: Request) -> TrimService:
    service: TrimService | None = getattr(request.app.state, "trim_service", None)
    if service is None:
        raise HTTPException(status_code=500, detail="trim service not initialized")
    return service


async def store_upload(
    store_obj: LocalArtifactStore,
    upload: UploadFile | None,
) -> StoredArtifact | None:
    if upload is None or not upload.filename:
        return None
    try:
        return await store_obj.save_upload(
            upload,
            original_filename=upload.filename,
            content_type=upload.content_type,
        )
    finally:
        try:
            await upload.close()
        except Exception:
            pass


async def run_unless_disconnected(
    request: Request,
    work: Awaitable[T],
    *,
    poll_s: float,
) -> T:
    """Await `work`, cancelling it (and its ffmpeg child) if the client goes away."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_s)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("client disconnected; cancelling %s", request.url.path)
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise ClientDisconnected(request.url.path)
    finally:
        if not task.done():
            task.cancel()
