"""Logging setup for voxsettings.

Logging Policy:
    Messages use "component: event, key=value" form.
    NEVER logged: API key values.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    level: str = "INFO",
    log_file: Path | None = None,
    console: bool = False,
) -> logging.Logger:
    """Set up the voxsettings package logger.

    Handlers are only added once; later calls just update the level.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Rotating log file (10MB max, 2 backups). None disables it.
        console: Also log to stderr.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger("voxsettings")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Only set up handlers if not already configured
    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=2,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        if console:
            stream_handler = logging.StreamHandler()
            stream_handler.setFormatter(formatter)
            logger.addHandler(stream_handler)

    return logger
