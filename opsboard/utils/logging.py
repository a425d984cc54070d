"""
Structured logging configuration using structlog.

Engine modules log through ``structlog.get_logger()``; callers that render
one dashboard view can bind the view's context (group, metric) once with
bind_view_context() so every engine event carries it.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from opsboard.config import get_settings


def add_severity(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add severity level for structured logging."""
    event_dict["severity"] = method_name.upper()
    return event_dict


def _select_renderer() -> Processor:
    settings = get_settings()
    if settings.log_format == "json" and not settings.dev_mode:
        return structlog.processors.JSONRenderer()
    # No ANSI colors in captured test output
    return structlog.dev.ConsoleRenderer(colors=not settings.testing)


def configure_logging() -> None:
    """
    Configure structlog for the engine and its callers.

    JSON lines in production, console rendering in dev mode and tests.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            add_severity,
            _select_renderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=not settings.testing,
    )


def bind_view_context(**context: Any) -> None:
    """
    Attach view context (e.g. group="Jeep", metric="revenue") to every
    event logged until clear_view_context() is called.
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_view_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)
