"""Request orchestration: probe, remove silence, report sizes, manage artifacts."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from trimsilence.config import Settings
from trimsilence.exceptions import (
    NoFileUploadedError,
    OutputNotCreatedError,
    ProbeError,
)
from trimsilence.models.artifact import ProcessingResult, StoredArtifact
from trimsilence.models.audio import AudioMetadata, SilencePeriod
from trimsilence.providers.audio.base import AudioProvider, ProgressCallback
from trimsilence.storage.artifact_store import LocalArtifactStore

logger = logging.getLogger(__name__)

DOWNLOAD_ROUTE = "/api/download"


def download_url(filename: str) -> str:
    return f"{DOWNLOAD_ROUTE}/{filename}"


class TrimService:
    def __init__(
        self,
        settings: Settings,
        store: LocalArtifactStore,
        provider: AudioProvider,
    ) -> None:
        self.settings = settings
        self.store = store
        self.provider = provider

    async def _probe(self, path: Path) -> AudioMetadata | None:
        try:
            metadata = await self.provider.probe(str(path))
        except ProbeError as exc:
            logger.warning("could not read audio metadata, using defaults: %s", exc)
            return None
        logger.info("original audio metadata: %s", metadata.to_dict())
        return metadata

    async def _discard(self, *paths: Path) -> None:
        for path in paths:
            try:
                await self.store.delete(path)
            except OSError:
                logger.exception("failed to remove artifact %s", path)

    async def handle_upload(
        self,
        upload: StoredArtifact | None,
        *,
        progress: ProgressCallback | None = None,
    ) -> ProcessingResult:
        """Trim silence from a stored upload and return the size report.

        Probing failures are non-fatal (format defaults apply). Any other
        failure, including cancellation, removes both the input and any
        partial output before propagating.
        """
        if upload is None:
            raise NoFileUploadedError("No audio file uploaded")

        input_path = Path(upload.path)
        output_filename, output_path = self.store.new_output_path(upload.original_filename)
        logger.info("processing audio file: %s", upload.original_filename)

        try:
            metadata = await self._probe(input_path)
            await self.provider.remove_silence(
                str(input_path),
                str(output_path),
                metadata,
                progress=progress,
            )
            if not output_path.exists():
                raise OutputNotCreatedError("Output file was not created")

            original_size = int(input_path.stat().st_size)
            new_size = int(output_path.stat().st_size)
        except asyncio.CancelledError:
            logger.info("processing cancelled: %s", upload.original_filename)
            await self._discard(input_path, output_path)
            raise
        except Exception:
            logger.exception("error processing audio: %s", upload.original_filename)
            await self._discard(input_path, output_path)
            raise

        result = ProcessingResult(
            output_filename=output_filename,
            download_url=download_url(output_filename),
            original_size_bytes=original_size,
            new_size_bytes=new_size,
        )
        logger.info(
            "trimmed %s -> %s (%d -> %d bytes, %s)",
            upload.original_filename,
            output_filename,
            original_size,
            new_size,
            result.size_reduction,
        )

        await self.store.schedule_delete(input_path, self.settings.cleanup.input_delay_s)
        return result

    async def detect_silence(self, upload: StoredArtifact | None) -> list[SilencePeriod]:
        """Report silent periods of an upload; the upload is removed afterwards."""
        if upload is None:
            raise NoFileUploadedError("No audio file uploaded")
        try:
            return await self.provider.detect_silence(str(upload.path))
        finally:
            await self._discard(Path(upload.path))
