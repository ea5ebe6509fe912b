# tests/test_logging.py
"""Tests for structured JSON logging and correlation ids."""

import json
import logging

import pytest

from commandless.utils.logging import (
    StructuredFormatter,
    configure_structured_logging,
    ensure_request_id,
    get_request_id,
    resolution_scope,
    set_request_id,
)


def make_record(message: str = "Resolved to /ban", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="commandless.core.resolution.policy",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clear_request_id():
    set_request_id("")
    yield
    set_request_id("")


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_base_fields(self):
        """Test every line carries timestamp, level, logger and message."""
        payload = json.loads(StructuredFormatter().format(make_record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "commandless.core.resolution.policy"
        assert payload["message"] == "Resolved to /ban"
        assert "timestamp" in payload
        assert "request_id" not in payload

    def test_request_id_included(self):
        """Test the current correlation id is attached."""
        set_request_id("abc123")
        payload = json.loads(StructuredFormatter().format(make_record()))
        assert payload["request_id"] == "abc123"

    def test_decision_fields(self):
        """Test whitelisted extra fields are carried into the payload."""
        record = make_record(
            decision="execute", template_id=1, confidence=0.92, matcher="llm", secret="x"
        )
        payload = json.loads(StructuredFormatter().format(record))

        assert payload["decision"] == "execute"
        assert payload["template_id"] == 1
        assert payload["confidence"] == 0.92
        assert payload["matcher"] == "llm"
        assert "secret" not in payload


class TestRequestId:
    """Tests for correlation id helpers."""

    def test_ensure_creates_once(self):
        """Test ensure_request_id creates an id and then reuses it."""
        first = ensure_request_id()
        assert first
        assert ensure_request_id() == first
        assert get_request_id() == first

    def test_ensure_keeps_existing(self):
        """Test an id set by the caller is kept."""
        set_request_id("from-header")
        assert ensure_request_id() == "from-header"

    def test_resolution_scope_fresh_per_block(self):
        """Test each scope without a caller id binds a new id and clears it."""
        with resolution_scope() as first:
            assert get_request_id() == first
        with resolution_scope() as second:
            assert get_request_id() == second

        assert first and second
        assert first != second
        assert get_request_id() == ""

    def test_resolution_scope_keeps_caller_id(self):
        """Test a scope inside a bound id reuses it and leaves it bound."""
        set_request_id("from-header")
        with resolution_scope() as request_id:
            assert request_id == "from-header"
        assert get_request_id() == "from-header"


class TestConfigure:
    """Tests for configure_structured_logging."""

    def test_idempotent(self):
        """Test configuring twice installs a single structured handler."""
        root = logging.getLogger()
        before = list(root.handlers)
        try:
            configure_structured_logging()
            configure_structured_logging(logging.DEBUG)

            structured = [
                h for h in root.handlers if isinstance(h.formatter, StructuredFormatter)
            ]
            assert len(structured) == 1
            assert root.level == logging.DEBUG
        finally:
            root.handlers = before
            root.setLevel(logging.WARNING)
