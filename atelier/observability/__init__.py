"""Structured logging and metrics."""

from atelier.observability.logging import (
    bind_turn_context,
    clear_turn_context,
    get_logger,
    setup_logging,
)

__all__ = ["bind_turn_context", "clear_turn_context", "get_logger", "setup_logging"]
