"""Utility functions for the intent resolution engine."""

from commandless.utils.logging import (
    configure_structured_logging,
    ensure_request_id,
    get_logger,
    get_request_id,
    resolution_scope,
    set_request_id,
)
from commandless.utils.observability import setup_logfire

__all__ = [
    "setup_logfire",
    "get_logger",
    "set_request_id",
    "get_request_id",
    "ensure_request_id",
    "resolution_scope",
    "configure_structured_logging",
]
