"""Logging setup shared by every layer of the conservation service."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from conservation.utils.config import get_settings


_LOGGER_INITIALIZED = False

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    The level comes from ``CONSERVATION_LOG_LEVEL`` unless one is passed in
    explicitly, e.g. by the launcher.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, stream=sys.stdout)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the process on first use."""
    configure_logging()
    return logging.getLogger(name)


def format_fields(**fields: Any) -> str:
    """Render ``key=value`` pairs in the pipe-separated style used in log lines."""
    return " | ".join(f"{key}={value}" for key, value in fields.items())
