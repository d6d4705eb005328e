"""Logging helpers for the file manager."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'
ROOT_LOGGER = 'filemanager'


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package logger; handlers live on the package logger."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + '.'):
        name = f'{ROOT_LOGGER}.{name}'
    return logging.getLogger(name)


def configure_logging(level: str = 'info') -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level.upper())
    return logger
