"""Logging setup: one RichHandler on stderr for the ``gitdiffwrap`` logger."""

from __future__ import annotations

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from gitdiffwrap.config.schema import LOG_LEVELS

LOGGER_NAME = "gitdiffwrap"

_LEVELS = {name: logging.getLevelName(name.upper()) for name in LOG_LEVELS}


def level_from_name(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    return _LEVELS.get(name.strip().lower(), default)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the package logger once and return it.

    *level* wins over ``GITDIFFWRAP_LOG_LEVEL``; INFO is the default.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_from_name(level or os.environ.get("GITDIFFWRAP_LOG_LEVEL")))
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)
