from __future__ import annotations

import re
from pathlib import Path

from fastapi.testclient import TestClient

from trimsilence.exceptions import TranscodeFailedError


def _audio(name: str = "talk.mp3", data: bytes = b"x" * 1000, content_type: str = "audio/mpeg"):
    return {"audio": (name, data, content_type)}


def test_trim_silence_returns_size_report(client, settings) -> None:
    res = client.post("/api/trim-silence", files=_audio())
    assert res.status_code == 200
    body = res.json()

    assert body["success"] is True
    assert body["message"] == "Audio processed successfully"
    assert re.fullmatch(r"trimmed-\d+-\d+\.mp3", body["filename"])
    assert body["downloadUrl"] == f"/api/download/{body['filename']}"
    assert body["originalSize"] == 1000
    assert body["newSize"] == 750
    assert body["sizeReduction"] == "25.00%"

    assert (Path(settings.output_dir) / body["filename"]).exists()
    assert list(Path(settings.uploads_dir).iterdir()) == []


def test_trim_silence_without_file_returns_400(client) -> None:
    res = client.post("/api/trim-silence", data={"other": "field"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "No audio file uploaded"
    assert body["code"] == "NO_FILE_UPLOADED"


def test_trim_silence_rejects_non_audio(client, settings, provider) -> None:
    res = client.post("/api/trim-silence", files=_audio("notes.txt", b"hello", "text/plain"))
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid file type"
    assert res.json()["message"] == "Invalid file type. Only audio files are allowed."
    assert provider.inputs == []
    assert list(Path(settings.uploads_dir).iterdir()) == []


def test_trim_silence_rejects_oversized_upload(client, settings) -> None:
    client.app.state.store.max_upload_bytes = 10

    res = client.post("/api/trim-silence", files=_audio(data=b"x" * 64))
    assert res.status_code == 400
    assert res.json()["code"] == "FILE_TOO_LARGE"
    assert list(Path(settings.uploads_dir).iterdir()) == []


def test_trim_silence_failure_returns_500_and_cleans_up(client, settings, provider) -> None:
    provider.error = TranscodeFailedError("ffmpeg failed (code=1): Error while opening encoder")

    res = client.post("/api/trim-silence", files=_audio())
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Failed to process audio"
    assert "opening encoder" in body["message"]
    assert body["code"] == "TRANSCODE_FAILED"
    assert list(Path(settings.uploads_dir).iterdir()) == []
    assert list(Path(settings.output_dir).iterdir()) == []


def test_detect_silence_reports_periods(client, settings) -> None:
    res = client.post("/api/detect-silence", files=_audio("voice.wav", b"RIFF", "audio/wav"))
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["silencePeriods"] == [{"start": 0.5, "end": 1.5, "duration": 1.0}]
    assert body["totalSilence"] == 1.0
    assert list(Path(settings.uploads_dir).iterdir()) == []


def test_unexpected_error_returns_generic_500(app, settings, provider) -> None:
    provider.error = PermissionError(f"[Errno 13] Permission denied: '{settings.output_dir}/x.mp3'")
    client = TestClient(app, raise_server_exceptions=False)

    res = client.post("/api/trim-silence", files=_audio())
    assert res.status_code == 500
    body = res.json()
    assert body == {
        "error": "Failed to process audio",
        "message": "An unexpected error occurred",
        "code": "UNKNOWN",
    }
    assert list(Path(settings.uploads_dir).iterdir()) == []
