"""Local filesystem artifact store for uploads and trimmed outputs."""

from __future__ import annotations

import asyncio
import logging
import random
import re
import time
from pathlib import Path
from typing import Iterable, Protocol

from trimsilence.exceptions import (
    ArtifactNotFoundError,
    FileTooLargeError,
    InvalidFileTypeError,
)
from trimsilence.models.artifact import StoredArtifact

logger = logging.getLogger(__name__)

OUTPUT_PREFIX = "trimmed-"

_EXT_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


def _safe_extension(filename: str | None) -> str:
    ext = Path(str(filename or "").replace("\x00", "")).suffix
    return ext if _EXT_RE.match(ext) else ""


def _normalize_content_type(content_type: str | None) -> str:
    return str(content_type or "").split(";", 1)[0].strip().lower()


def unique_name(original_filename: str | None, *, prefix: str = "") -> str:
    """`<prefix><epoch-ms>-<random><ext>`; best-effort unique across concurrent requests."""
    stamp = int(time.time() * 1000)
    suffix = random.randint(0, 999_999_999)
    return f"{prefix}{stamp}-{suffix}{_safe_extension(original_filename)}"


class LocalArtifactStore:
    """Holding area for uploaded inputs and trimmed outputs.

    Every request only touches its own uniquely named files, so no locking is
    used. Deferred deletions are tracked so they can be flushed on shutdown.
    """

    def __init__(
        self,
        uploads_dir: str,
        output_dir: str,
        *,
        max_upload_bytes: int = 100 * 1024 * 1024,
        allowed_mime_types: Iterable[str] = (),
        chunk_size: int = 1024 * 1024,
    ) -> None:
        self.uploads_dir = Path(uploads_dir)
        self.output_dir = Path(output_dir)
        self.max_upload_bytes = int(max_upload_bytes)
        self.allowed_mime_types = frozenset(_normalize_content_type(m) for m in allowed_mime_types)
        self.chunk_size = int(chunk_size)
        self._pending: dict[Path, asyncio.Task[None]] = {}

    def ensure_dirs(self) -> None:
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def validate_content_type(self, content_type: str | None) -> str:
        normalized = _normalize_content_type(content_type)
        if self.allowed_mime_types and normalized not in self.allowed_mime_types:
            raise InvalidFileTypeError("Invalid file type. Only audio files are allowed.")
        return normalized

    async def save_upload(
        self,
        upload: AsyncReadable,
        *,
        original_filename: str | None,
        content_type: str | None,
    ) -> StoredArtifact:
        """Validate and stream an upload to disk; oversized uploads leave nothing behind."""
        normalized = self.validate_content_type(content_type)
        self.ensure_dirs()

        filename = unique_name(original_filename)
        target = self.uploads_dir / filename
        written = 0
        try:
            with target.open("wb") as f:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_upload_bytes:
                        raise FileTooLargeError(self.max_upload_bytes)
                    f.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise

        logger.info("stored upload %s (%d bytes, %s)", filename, written, normalized)
        return StoredArtifact(
            filename=filename,
            path=target,
            original_filename=str(original_filename or filename),
            content_type=normalized,
            size_bytes=written,
        )

    def new_output_path(self, original_filename: str | None) -> tuple[str, Path]:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filename = unique_name(original_filename, prefix=OUTPUT_PREFIX)
        return filename, self.output_dir / filename

    def resolve_output(self, filename: str) -> Path:
        name = str(filename or "")
        if not name or "/" in name or "\\" in name or ".." in name or "\x00" in name:
            raise ArtifactNotFoundError("File not found")
        path = self.output_dir / name
        if not path.is_file():
            raise ArtifactNotFoundError("File not found")
        return path

    async def delete(self, path: str | Path) -> bool:
        p = Path(path)
        try:
            p.unlink()
        except FileNotFoundError:
            return False
        logger.debug("deleted artifact %s", p)
        return True

    async def schedule_delete(self, path: str | Path, delay_s: float) -> None:
        """Delete `path` after `delay_s` seconds; immediately when the delay is not positive."""
        p = Path(path)
        if delay_s <= 0:
            await self.delete(p)
            return

        previous = self._pending.pop(p, None)
        if previous is not None:
            previous.cancel()

        async def _later() -> None:
            try:
                await asyncio.sleep(delay_s)
                await self.delete(p)
            except OSError:
                logger.exception("deferred delete failed (path=%s)", p)
            finally:
                if self._pending.get(p) is task:
                    self._pending.pop(p, None)

        task = asyncio.create_task(_later())
        self._pending[p] = task

    @property
    def pending_deletions(self) -> list[Path]:
        return list(self._pending)

    async def aclose(self) -> None:
        """Flush deferred deletions now instead of waiting out their delays."""
        pending = dict(self._pending)
        self._pending.clear()
        for task in pending.values():
            task.cancel()
        if pending:
            await asyncio.gather(*pending.values(), return_exceptions=True)
        for path in pending:
            await self.delete(path)

    async def sweep_stale(self, max_age_s: float, *, dry_run: bool = False) -> list[Path]:
        """Remove files older than `max_age_s` left behind by earlier processes."""
        cutoff = time.time() - float(max_age_s)
        removed: list[Path] = []
        for base in (self.uploads_dir, self.output_dir):
            if not base.exists():
                continue
            for p in sorted(base.iterdir()):
                if not p.is_file() or p in self._pending:
                    continue
                try:
                    if p.stat().st_mtime >= cutoff:
                        continue
                except FileNotFoundError:
                    continue
                if dry_run or await self.delete(p):
                    removed.append(p)
        return removed
