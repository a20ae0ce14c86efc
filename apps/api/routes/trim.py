"""Silence trimming routes."""

from __future__ import annotations

from fastapi import APIRouter, File, Request, UploadFile
from pydantic import BaseModel

from routes._deps import run_unless_disconnected, settings, store_upload, trim_service

router = APIRouter(prefix="/api", tags=["trim"])


class TrimResponse(BaseModel):
    success: bool = True
    message: str
    filename: str
    downloadUrl: str
    originalSize: int
    newSize: int
    sizeReduction: str


class SilencePeriodResponse(BaseModel):
    start: float
    end: float
    duration: float


class DetectSilenceResponse(BaseModel):
    success: bool = True
    silencePeriods: list[SilencePeriodResponse]
    totalSilence: float


@router.post("/trim-silence", response_model=TrimResponse)
async def trim_silence(request: Request, audio: UploadFile | None = File(None)) -> TrimResponse:
    service = trim_service(request)
    stored = await store_upload(service.store, audio)

    result = await run_unless_disconnected(
        request,
        service.handle_upload(stored),
        poll_s=settings(request).disconnect_poll_s,
    )
    return TrimResponse(
        message="Audio processed successfully",
        filename=result.output_filename,
        downloadUrl=result.download_url,
        originalSize=result.original_size_bytes,
        newSize=result.new_size_bytes,
        sizeReduction=result.size_reduction,
    )


@router.post("/detect-silence", response_model=DetectSilenceResponse)
async def detect_silence(
    request: Request, audio: UploadFile | None = File(None)
) -> DetectSilenceResponse:
    service = trim_service(request)
    stored = await store_upload(service.store, audio)

    periods = await run_unless_disconnected(
        request,
        service.detect_silence(stored),
        poll_s=settings(request).disconnect_poll_s,
    )
    return DetectSilenceResponse(
        silencePeriods=[
            SilencePeriodResponse(start=p.start, end=p.end, duration=round(p.duration, 6))
            for p in periods
        ],
        totalSilence=round(sum(p.duration for p in periods), 6),
    )
