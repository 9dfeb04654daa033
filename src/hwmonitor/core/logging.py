"""Logging helpers for hwmonitor.

All modules log through ``get_logger(__name__)`` so that a single threshold
on the ``hwmonitor`` logger controls the whole package.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Optional, Union

ROOT_LOGGER_NAME = "hwmonitor"

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class LogLevel(str, Enum):
    """Recognized severity thresholds, quietest first."""

    SILENT = "silent"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


# SILENT maps above CRITICAL so nothing passes the threshold.
_LEVEL_MAP = {
    LogLevel.SILENT: logging.CRITICAL + 10,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under ``hwmonitor``."""
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def parse_log_level(value: Union[str, LogLevel]) -> LogLevel:
    """Convert a string such as ``"warn"`` to a LogLevel.

    Raises:
        ValueError: If the value is not a recognized level.
    """
    if isinstance(value, LogLevel):
        return value
    normalized = str(value).strip().lower()
    if normalized == "warning":
        normalized = "warn"
    try:
        return LogLevel(normalized)
    except ValueError:
        valid = ", ".join(level.value for level in LogLevel)
        raise ValueError(f"Invalid log level '{value}'. Valid levels: {valid}") from None


def set_log_level(level: Union[str, LogLevel]) -> None:
    """Apply a threshold to the package logger without touching handlers."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(_LEVEL_MAP[parse_log_level(level)])


def configure_logging(
    level: Optional[Union[str, LogLevel]] = None,
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Configure console logging for command-line use.

    Flags take precedence over ``level``: ``debug`` > ``quiet`` > ``verbose``.
    Without flags or level the threshold is ``warn``.
    """
    if debug:
        resolved = LogLevel.DEBUG
    elif quiet:
        resolved = LogLevel.ERROR
    elif verbose:
        resolved = LogLevel.INFO
    elif level is not None:
        resolved = parse_log_level(level)
    else:
        resolved = LogLevel.WARN

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_LEVEL_MAP[resolved])
    logger.propagate = False
