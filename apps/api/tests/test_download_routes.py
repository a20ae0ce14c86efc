from __future__ import annotations

from pathlib import Path


def test_download_serves_file_then_removes_it(client, settings) -> None:
    res = client.post("/api/trim-silence", files={"audio": ("talk.mp3", b"x" * 1000, "audio/mpeg")})
    url = res.json()["downloadUrl"]
    filename = res.json()["filename"]

    res = client.get(url)
    assert res.status_code == 200
    assert res.content == b"y" * 750
    assert filename in res.headers["content-disposition"]

    # download_delay_s=0 in the test settings
    assert not (Path(settings.output_dir) / filename).exists()
    res = client.get(url)
    assert res.status_code == 404


def test_download_unknown_file_returns_404(client) -> None:
    res = client.get("/api/download/trimmed-1-1.mp3")
    assert res.status_code == 404
    body = res.json()
    assert body["error"] == "File not found"
    assert body["code"] == "FILE_NOT_FOUND"


def test_download_rejects_path_traversal(client, settings) -> None:
    (Path(settings.uploads_dir) / "secret.mp3").write_bytes(b"x")
    res = client.get("/api/download/..%2Fuploads%2Fsecret.mp3")
    assert res.status_code == 404
    assert (Path(settings.uploads_dir) / "secret.mp3").exists()
