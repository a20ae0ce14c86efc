"""Logging for the service and the uvicorn server that hosts it.

`trimsilence.*` and the uvicorn loggers share one set of handlers so request
lines, ffmpeg command lines and failures end up in the same stream/file.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from trimsilence.config import LoggingSettings

SERVICE_LOGGER = "trimsilence"
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _log_file(cfg: LoggingSettings, log_dir: str | Path) -> Path | None:
    if not cfg.file:
        return None
    path = Path(str(cfg.file))
    if not path.is_absolute():
        path = Path(log_dir) / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def build_handlers(cfg: LoggingSettings, log_dir: str | Path) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))
    handlers: list[logging.Handler] = []
    if cfg.console:
        handlers.append(logging.StreamHandler())

    path = _log_file(cfg, log_dir)
    if path is not None:
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=int(cfg.max_bytes),
                backupCount=int(cfg.backup_count),
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    cfg: LoggingSettings,
    *,
    log_dir: str | Path,
    include_server: bool = True,
) -> list[logging.Handler]:
    """(Re)configure the service loggers; safe to call more than once.

    Handlers installed by a previous call are closed and replaced. With
    `include_server`, uvicorn's loggers use the same handlers.
    """
    level = getattr(logging, str(cfg.level or "INFO").upper(), logging.INFO)
    handlers = build_handlers(cfg, log_dir)

    names = [SERVICE_LOGGER, *(SERVER_LOGGERS if include_server else ())]
    for name in names:
        logger = logging.getLogger(name)
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        # each logger owns the shared handlers, so nothing may also propagate
        logger.propagate = False
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)
    return handlers
