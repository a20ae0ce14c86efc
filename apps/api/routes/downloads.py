"""Trimmed output download routes."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from trimsilence.storage import LocalArtifactStore

from routes._deps import settings, store

router = APIRouter(prefix="/api", tags=["downloads"])


async def _cleanup_after_download(store_obj: LocalArtifactStore, path: Path, delay_s: float) -> None:
    await store_obj.schedule_delete(path, delay_s)


@router.get("/download/{filename}")
async def download(request: Request, filename: str) -> FileResponse:
    store_obj = store(request)
    path = store_obj.resolve_output(filename)
    return FileResponse(
        path,
        filename=path.name,
        background=BackgroundTask(
            _cleanup_after_download,
            store_obj,
            path,
            settings(request).cleanup.download_delay_s,
        ),
    )
