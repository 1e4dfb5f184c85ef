"""Logging setup for the wellness portal.

Modules log through ``logging.getLogger(__name__)``; this helper attaches
a single console handler to the package logger so the output looks the
same under the development server, gunicorn and the seed script.
"""
from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "wellness_portal"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Configure the package logger and return it.

    Safe to call more than once; the handler is only added the first time
    and later calls just update the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not any(getattr(handler, "_wellness_portal", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._wellness_portal = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
