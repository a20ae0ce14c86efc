"""Artifact and result models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StoredArtifact:
    """An upload persisted in the artifact store."""

    filename: str
    path: Path
    original_filename: str
    content_type: str
    size_bytes: int


@dataclass(frozen=True)
class ProcessingResult:
    output_filename: str
    download_url: str
    original_size_bytes: int
    new_size_bytes: int

    @property
    def reduction_percent(self) -> float:
        if self.original_size_bytes <= 0:
            return 0.0
        saved = self.original_size_bytes - self.new_size_bytes
        return round(saved / self.original_size_bytes * 100, 2)

    @property
    def size_reduction(self) -> str:
        return f"{self.reduction_percent:.2f}%"
