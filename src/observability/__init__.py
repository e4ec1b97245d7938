"""Observability module for structured logging."""

from src.observability.logging import (
    bind_session_context,
    clear_session_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_session_context",
    "clear_session_context",
    "configure_logging",
    "get_logger",
]
