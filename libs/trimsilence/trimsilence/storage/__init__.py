"""Artifact storage."""

from trimsilence.config import Settings
from trimsilence.storage.artifact_store import LocalArtifactStore, unique_name


def get_artifact_store(settings: Settings) -> LocalArtifactStore:
    return LocalArtifactStore(
        settings.uploads_dir,
        settings.output_dir,
        max_upload_bytes=settings.upload_max_bytes,
        allowed_mime_types=settings.allowed_mime_set,
    )


__all__ = ["LocalArtifactStore", "get_artifact_store", "unique_name"]
