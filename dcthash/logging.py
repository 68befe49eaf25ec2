from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "dcthash"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _level(name) -> int:
    if isinstance(name, int):
        return name
    name = (name or "INFO").upper().strip()
    return getattr(logging, name, logging.INFO)


def configure_logging(level="INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Console handler plus an optional file handler on the package logger.

    Calling it again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(level))
    logger.handlers.clear()

    fmt = logging.Formatter(LOG_FORMAT)
    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    logger.debug("Logging configured (level=%s, file=%s)", logging.getLevelName(logger.level), log_file)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a child logger under the package namespace."""
    base = logging.getLogger(LOGGER_NAME)
    if name:
        return base.getChild(name)
    return base
