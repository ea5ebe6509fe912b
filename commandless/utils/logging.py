# commandless/utils/logging.py
"""Structured logging with JSON format and correlation ID support.

Provides:
- JSON-formatted log output for structured logging
- Resolution correlation ID via ContextVar for async-safe tracking
- Selected ``extra=`` fields (decision, template_id, confidence, matcher)
  carried into the JSON payload
"""

import json
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

# Correlation ID shared by every log line emitted while resolving one utterance
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

STRUCTURED_EXTRA_FIELDS = ("tenant_id", "channel_id", "decision", "template_id", "confidence", "matcher")


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        request_id: Unique identifier for the request or utterance.
    """
    request_id_var.set(request_id)


def get_request_id() -> str:
    """Get the correlation ID for the current context.

    Returns:
        Current request ID, or empty string if not set.
    """
    return request_id_var.get()


def ensure_request_id() -> str:
    """Return the current correlation ID, creating one if none is set."""
    request_id = request_id_var.get()
    if not request_id:
        request_id = uuid.uuid4().hex[:12]
        request_id_var.set(request_id)
    return request_id


@contextmanager
def resolution_scope() -> Iterator[str]:
    """Bind a correlation ID for one resolution.

    An ID already bound by the caller (the HTTP middleware) is kept.
    Otherwise a fresh one is set for the block and cleared on exit, so
    successive resolutions never share an ID.
    """
    current = request_id_var.get()
    if current:
        yield current
        return

    token = request_id_var.set(uuid.uuid4().hex[:12])
    try:
        yield request_id_var.get()
    finally:
        request_id_var.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON with timestamp, level, logger name,
    message, the correlation ID and any whitelisted extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        for field in STRUCTURED_EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance by name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure structured JSON logging for the application.

    Sets up a StreamHandler with StructuredFormatter and applies
    it to the root logger. Calling it twice does not add a second handler.

    Args:
        level: Logging level (default: logging.INFO).
    """
    for existing in logging.root.handlers:
        if isinstance(existing.formatter, StructuredFormatter):
            logging.root.setLevel(level)
            return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(level)
