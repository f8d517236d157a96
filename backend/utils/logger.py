"""Logging for the parking engine.

All engine loggers hang off one ``parking`` logger, which owns a single
stdout handler. Records are pipe-delimited to match the
``event | key=value | ...`` messages the services emit.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from backend.utils.config import get_settings


ENGINE_LOGGER_NAME = "parking"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach the stdout handler to the engine logger once; later calls only adjust the level."""
    engine_logger = logging.getLogger(ENGINE_LOGGER_NAME)
    engine_logger.setLevel((level or get_settings().log_level).upper())

    if not engine_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        engine_logger.addHandler(handler)
    return engine_logger


def get_logger(name: str) -> logging.Logger:
    engine_logger = logging.getLogger(ENGINE_LOGGER_NAME)
    if not engine_logger.handlers:
        configure_logging()
    return engine_logger.getChild(name)
