"""
Structured logging configuration using structlog.

Provides JSON-formatted logging with context processors for
timestamps, log levels and per-request context.
"""
import logging
import sys
from typing import Any

import structlog


def setup_logging(level: str = "INFO", environment: str = "production") -> None:
    """
    Configure structured logging with structlog.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Deployment environment; "development" switches to
            the coloured console renderer

    Sets up:
        - JSON output format for production
        - Console output with colors for development
        - Context processors for timestamps and metadata
        - Integration with standard library logging
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if environment == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("cache_hit", cache_key="pricing_rate:Summer:Resort:Suite")
    """
    return structlog.get_logger(name)


def log_event(logger: Any, level: str, event: str, **context: Any) -> None:
    """
    Emit a structured event without letting logging failures escape.

    A broken renderer or sink must never change the outcome of the
    operation being logged, so errors raised while logging are dropped.

    Args:
        logger: structlog logger (usually pre-bound with request context)
        level: Method name on the logger ("info", "warning", "error", ...)
        event: Snake_case event name
        **context: Additional key/value context
    """
    try:
        getattr(logger, level)(event, **context)
    except Exception:  # noqa: BLE001 - logging must not affect callers
        pass
