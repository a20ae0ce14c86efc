from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from trimsilence.config import Settings
from trimsilence.models.audio import AudioMetadata, SilencePeriod
from trimsilence.providers.audio.base import AudioProvider
from trimsilence.services import TrimService
from trimsilence.storage import get_artifact_store

_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))


class FakeAudioProvider(AudioProvider):
    """Writes a fixed-size output instead of running ffmpeg."""

    def __init__(self) -> None:
        self.output_size = 750
        self.error: Exception | None = None
        self.silence = [SilencePeriod(0.5, 1.5)]
        self.inputs: list[str] = []

    async def probe(self, path: str) -> AudioMetadata:  # noqa: ARG002
        return AudioMetadata(codec="mp3", sample_rate=44100, channels=2, bitrate=128_000)

    async def remove_silence(self, input_path, output_path, metadata=None, *, progress=None):  # noqa: ANN001,ARG002
        self.inputs.append(input_path)
        if self.error is not None:
            raise self.error
        Path(output_path).write_bytes(b"y" * self.output_size)

    async def detect_silence(self, path: str) -> list[SilencePeriod]:
        self.inputs.append(path)
        return list(self.silence)


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        uploads_dir=str(tmp_path / "uploads"),
        output_dir=str(tmp_path / "output"),
        log_dir=str(tmp_path / "logs"),
        cleanup={"input_delay_s": 0, "download_delay_s": 0},
    )


@pytest.fixture()
def provider() -> FakeAudioProvider:
    return FakeAudioProvider()


@pytest.fixture()
def app(settings: Settings, provider: FakeAudioProvider) -> FastAPI:
    from errors import install_error_handlers
    from routes.downloads import router as downloads_router
    from routes.health import router as health_router
    from routes.trim import router as trim_router

    store = get_artifact_store(settings)
    store.ensure_dirs()

    test_app = FastAPI()
    test_app.state.settings = settings
    test_app.state.store = store
    test_app.state.trim_service = TrimService(settings, store, provider)
    install_error_handlers(test_app)
    test_app.include_router(trim_router)
    test_app.include_router(downloads_router)
    test_app.include_router(health_router)
    return test_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
