"""Utility modules for logging and common helpers."""

from opsboard.utils.logging import (
    bind_view_context,
    clear_view_context,
    configure_logging,
    get_logger,
)

__all__ = ["bind_view_context", "clear_view_context", "configure_logging", "get_logger"]
