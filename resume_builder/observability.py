"""Logging setup shared by the CLI and the HTTP server."""

from __future__ import annotations

import logging
from typing import Union

LOGGER_NAME = "resume_builder"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Calling this more than once only adjusts the level.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
