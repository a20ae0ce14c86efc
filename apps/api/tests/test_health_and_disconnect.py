from __future__ import annotations

import asyncio

import pytest


def test_health(client) -> None:
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "message": "Audio trimmer service is running"}


class _FakeURL:
    path = "/api/trim-silence"


class _FakeRequest:
    def __init__(self, disconnected: bool) -> None:
        self.disconnected = disconnected
        self.url = _FakeURL()

    async def is_disconnected(self) -> bool:
        return self.disconnected


async def test_run_unless_disconnected_returns_result() -> None:
    from routes._deps import run_unless_disconnected

    async def _work() -> str:
        await asyncio.sleep(0.02)
        return "done"

    assert await run_unless_disconnected(_FakeRequest(False), _work(), poll_s=0.005) == "done"


async def test_run_unless_disconnected_cancels_work() -> None:
    from errors import ClientDisconnected
    from routes._deps import run_unless_disconnected

    cancelled = asyncio.Event()

    async def _work() -> None:
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    with pytest.raises(ClientDisconnected):
        await run_unless_disconnected(_FakeRequest(True), _work(), poll_s=0.01)
    assert cancelled.is_set()


def test_client_disconnect_maps_to_499(app, client) -> None:
    from errors import ClientDisconnected

    @app.get("/api/_disconnect")
    async def _disconnect() -> None:
        raise ClientDisconnected("/api/_disconnect")

    res = client.get("/api/_disconnect")
    assert res.status_code == 499
