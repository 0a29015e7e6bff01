"""Centralized logging configuration for the receipt engine.

Usage:
    from receipt_engine.logging import get_logger
    logger = get_logger(__name__)

Environment variables:
    RECEIPT_ENGINE_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR).
        Default: WARNING, so printed receipts are not interleaved with
        diagnostics.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

DEFAULT_LOG_LEVEL = logging.WARNING
LOG_NAMESPACE = "receipt_engine"

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def parse_level(name: Optional[str]) -> int:
    """Map a level name to a logging constant, falling back to the default."""
    if not name:
        return DEFAULT_LOG_LEVEL
    return _LEVELS.get(name.strip().upper(), DEFAULT_LOG_LEVEL)


def configure_logging(level: Optional[int] = None) -> None:
    """
    Configure the package logger.

    If level is None, reads RECEIPT_ENGINE_LOG_LEVEL or uses
    DEFAULT_LOG_LEVEL. Subsequent calls are no-ops; use set_log_level
    to change the level afterwards.
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = parse_level(os.environ.get("RECEIPT_ENGINE_LOG_LEVEL"))

    log_format = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_format))

    root_logger = logging.getLogger(LOG_NAMESPACE)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace for a module name."""
    configure_logging()
    if name == LOG_NAMESPACE or name.startswith(LOG_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOG_NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the log level at runtime."""
    configure_logging(level)
    logger = logging.getLogger(LOG_NAMESPACE)
    logger.setLevel(level)

    fmt = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(fmt))
