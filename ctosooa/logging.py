"""Logging utilities for ctosooa commands."""

from __future__ import annotations

import logging
import sys

_LOGGER_NAME = "ctosooa"
_FORMAT = "[ctosooa] %(levelname)s %(message)s"
_VERBOSE_FORMAT = "[ctosooa] %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the ctosooa hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Route ctosooa diagnostics to stderr, keeping stdout for command output.

    Verbose mode lowers the level to DEBUG and adds the emitting logger's name.
    Handlers are replaced on every call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT if verbose else _FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
