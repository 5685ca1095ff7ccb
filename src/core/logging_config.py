"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Every module logs named events with keyword fields through it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.config import BuildLayoutConfig
from core.errors import BuildLayoutConfigError


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level()),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(name)


def _resolve_level() -> int:
    """Map the configured level name onto a stdlib level number.

    Returns:
        Numeric logging level, INFO when configuration is invalid.
    """
    try:
        level_name = BuildLayoutConfig.from_env().log_level
    except BuildLayoutConfigError:
        return logging.INFO
    return logging.getLevelName(level_name.upper())
