"""Application services."""

from trimsilence.services.trim_service import TrimService, download_url

__all__ = ["TrimService", "download_url"]
