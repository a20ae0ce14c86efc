from __future__ import annotations

from pathlib import Path

import pytest

from trimsilence.config import Settings
from trimsilence.models.artifact import StoredArtifact
from trimsilence.storage import LocalArtifactStore, get_artifact_store


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        uploads_dir=str(tmp_path / "uploads"),
        output_dir=str(tmp_path / "output"),
        log_dir=str(tmp_path / "logs"),
        cleanup={"input_delay_s": 0, "download_delay_s": 0},
    )


@pytest.fixture()
async def store(settings: Settings):
    store_obj = get_artifact_store(settings)
    store_obj.ensure_dirs()
    try:
        yield store_obj
    finally:
        await store_obj.aclose()


@pytest.fixture()
def make_upload(store: LocalArtifactStore):
    def _make(name: str = "talk.mp3", data: bytes = b"x" * 1000) -> StoredArtifact:
        path = Path(store.uploads_dir) / f"1700000000000-1{Path(name).suffix}"
        path.write_bytes(data)
        return StoredArtifact(
            filename=path.name,
            path=path,
            original_filename=name,
            content_type="audio/mpeg",
            size_bytes=len(data),
        )

    return _make
