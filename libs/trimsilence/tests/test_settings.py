from __future__ import annotations

from pathlib import Path

import pytest

from trimsilence.config import AudioConfig, Settings
from trimsilence.exceptions import ConfigurationError
from trimsilence.providers import get_audio_provider


def test_settings_resolve_and_create_directories(tmp_path) -> None:
    s = Settings(
        uploads_dir=str(tmp_path / "u"),
        output_dir=str(tmp_path / "o"),
        log_dir=str(tmp_path / "l"),
    )
    for d in (s.uploads_dir, s.output_dir, s.log_dir):
        assert Path(d).is_absolute()
        assert Path(d).is_dir()


def test_settings_defaults() -> None:
    audio = AudioConfig()
    assert audio.silence_threshold_db == -30.0
    assert audio.min_silence_s == 0.5
    assert audio.bitrate_mode == "source"
    assert audio.probe_timeout_s == 30.0
    assert audio.transcode_timeout_s == 600.0


def test_allowed_mime_set_normalizes(tmp_path) -> None:
    s = Settings(
        uploads_dir=str(tmp_path / "u"),
        output_dir=str(tmp_path / "o"),
        log_dir=str(tmp_path / "l"),
        allowed_mime_types=[" Audio/MPEG ", "", "audio/wav"],
    )
    assert s.allowed_mime_set == frozenset({"audio/mpeg", "audio/wav"})


def test_bitrate_mode_is_normalized_and_validated() -> None:
    assert AudioConfig(bitrate_mode=" FIXED ").bitrate_mode == "fixed"
    with pytest.raises(ConfigurationError):
        AudioConfig(bitrate_mode="vbr")


def test_bitrate_mode_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("AUDIO_BITRATE_MODE", "fixed")
    monkeypatch.setenv("AUDIO_SILENCE_THRESHOLD_DB", "-42")
    audio = AudioConfig()
    assert audio.bitrate_mode == "fixed"
    assert audio.silence_threshold_db == -42.0


def test_unknown_provider_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        get_audio_provider({"provider": "sox"})
