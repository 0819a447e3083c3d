"""
Centralized logging configuration for Vigil.

This module provides consistent logging setup across all modules
and a helper for structured event lines.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

# Module-level logger cache
_loggers_configured: bool = False


def configure_logging(
    level: int = logging.INFO,
    verbose: bool = False,
) -> None:
    """Configure logging for the entire application.

    This should be called once at application startup.

    Args:
        level: Base logging level (e.g., logging.INFO, logging.WARNING).
        verbose: If True, sets level to DEBUG.
    """
    global _loggers_configured

    if verbose:
        level = logging.DEBUG

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    _configure_third_party_loggers()

    _loggers_configured = True


def _configure_third_party_loggers() -> None:
    """Configure logging levels for third-party libraries."""
    logging.getLogger("urllib3").setLevel(logging.ERROR)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.ERROR)
    logging.getLogger("requests").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Ensures logging is configured before returning the logger.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Configured Logger instance.
    """
    if not _loggers_configured:
        configure_logging()

    return logging.getLogger(name)


def set_log_level(level: int, logger_name: str | None = None) -> None:
    """Set log level for a specific logger or root logger."""
    if logger_name:
        logging.getLogger(logger_name).setLevel(level)
    else:
        logging.getLogger().setLevel(level)


def log_event(
    logger: logging.Logger,
    level: int,
    event_type: str,
    subject: str,
    message: str,
    **kwargs: Any,
) -> None:
    """Log a structured event with consistent formatting.

    Args:
        logger: Logger instance to use.
        level: Logging level.
        event_type: Type of event (e.g., SLO_EVALUATED, RUN_ABORTED).
        subject: SLO display name or provider the event is about.
        message: Human-readable message.
        **kwargs: Additional key-value pairs to include.
    """
    extra_parts = " ".join(f"{k}={v}" for k, v in kwargs.items())
    full_message = f"{event_type} - {subject}: {message}"
    if extra_parts:
        full_message = f"{full_message} [{extra_parts}]"
    logger.log(level, full_message)


class EventType:
    """Standard event types for structured logging."""

    # Run lifecycle
    RUN_START = "RUN_START"
    RUN_COMPLETE = "RUN_COMPLETE"
    RUN_ABORTED = "RUN_ABORTED"

    # Per-SLO outcomes
    SLO_EVALUATED = "SLO_EVALUATED"
    SLO_NO_DATA = "SLO_NO_DATA"
    SLO_FAILED = "SLO_FAILED"

    # Provider traffic
    PROVIDER_REQUEST = "PROVIDER_REQUEST"
