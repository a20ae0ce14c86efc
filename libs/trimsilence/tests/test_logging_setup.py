from __future__ import annotations

import logging

import pytest

from trimsilence.config import LoggingSettings
from trimsilence.utils.logging_setup import SERVER_LOGGERS, SERVICE_LOGGER, setup_logging

_NAMES = (SERVICE_LOGGER, *SERVER_LOGGERS)


@pytest.fixture(autouse=True)
def restore_loggers():
    saved = {
        name: (list(lg.handlers), lg.level, lg.propagate)
        for name, lg in ((n, logging.getLogger(n)) for n in _NAMES)
    }
    yield
    for name, (handlers, level, propagate) in saved.items():
        lg = logging.getLogger(name)
        for h in list(lg.handlers):
            lg.removeHandler(h)
            if h not in handlers:
                h.close()
        for h in handlers:
            lg.addHandler(h)
        lg.setLevel(level)
        lg.propagate = propagate


def _cfg(**overrides) -> LoggingSettings:  # noqa: ANN003
    return LoggingSettings(**{"console": False, "file": "service.log", "format": "%(name)s|%(message)s", **overrides})


def test_service_and_server_logs_share_the_log_file(tmp_path) -> None:
    setup_logging(_cfg(), log_dir=tmp_path)

    logging.getLogger("trimsilence.providers.audio.ffmpeg").info("ffmpeg command: ffmpeg -i in.mp3")
    logging.getLogger("uvicorn.access").info("POST /api/trim-silence 200")
    for h in logging.getLogger(SERVICE_LOGGER).handlers:
        h.flush()

    lines = (tmp_path / "service.log").read_text(encoding="utf-8").splitlines()
    assert lines == [
        "trimsilence.providers.audio.ffmpeg|ffmpeg command: ffmpeg -i in.mp3",
        "uvicorn.access|POST /api/trim-silence 200",
    ]


def test_reconfiguring_replaces_previous_handlers(tmp_path) -> None:
    first = setup_logging(_cfg(), log_dir=tmp_path)
    second = setup_logging(_cfg(level="debug"), log_dir=tmp_path)

    service = logging.getLogger(SERVICE_LOGGER)
    assert service.handlers == second
    assert not set(first) & set(service.handlers)
    assert service.level == logging.DEBUG
    assert service.propagate is False


def test_server_loggers_left_alone_when_excluded(tmp_path) -> None:
    before = list(logging.getLogger("uvicorn.access").handlers)

    handlers = setup_logging(_cfg(file=None, console=True), log_dir=tmp_path, include_server=False)

    assert logging.getLogger("uvicorn.access").handlers == before
    assert [type(h) for h in handlers] == [logging.StreamHandler]
    assert not (tmp_path / "service.log").exists()
