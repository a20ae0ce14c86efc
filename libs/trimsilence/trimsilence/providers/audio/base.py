"""Audio provider abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from trimsilence.models.audio import AudioMetadata, SilencePeriod


class ProgressCallback(Protocol):
    def __call__(self, percent: float | None, message: str) -> None: ...


class AudioProvider(ABC):
    @abstractmethod
    async def probe(self, path: str) -> AudioMetadata:
        raise NotImplementedError

    @abstractmethod
    async def remove_silence(
        self,
        input_path: str,
        output_path: str,
        metadata: AudioMetadata | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        raise NotImplementedError

    async def detect_silence(self, path: str) -> list[SilencePeriod]:
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover
        return None
