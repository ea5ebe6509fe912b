# tests/test_confirmation.py
"""Tests for yes/no detection and pending confirmations."""

import pytest

from commandless.core.matching.base import MatchCandidate
from commandless.core.resolution.confirmation import (
    PendingConfirmationStore,
    is_affirmative_response,
    is_negative_response,
)


class TestResponses:
    """Tests for affirmative and negative reply detection."""

    @pytest.mark.parametrize("text", ["yes", "Yes!", "yep", "sure thing", "ok.", "that's right", "👍"])
    def test_affirmative(self, text):
        assert is_affirmative_response(text)

    @pytest.mark.parametrize("text", ["no", "Nope.", "nah man", "absolutely not", "no thanks", "👎"])
    def test_negative(self, text):
        assert is_negative_response(text)
        assert not is_affirmative_response(text)

    def test_negative_wins_over_affirmative(self):
        """Test phrases starting with an affirmative word but meaning no."""
        assert is_negative_response("definitely not")
        assert not is_affirmative_response("definitely not")

    @pytest.mark.parametrize("text", ["nothing", "yesterday was fun", "ban <@1>", ""])
    def test_neither(self, text):
        """Test unrelated messages are neither."""
        assert not is_affirmative_response(text)
        assert not is_negative_response(text)


class TestPendingConfirmationStore:
    """Tests for the pending confirmation store."""

    @pytest.fixture
    def candidate(self, ban_template):
        return MatchCandidate(template=ban_template, confidence=0.5, params={"user": "1"})

    def test_put_and_pop(self, clock, candidate):
        """Test a pending confirmation is returned once."""
        store = PendingConfirmationStore(ttl_seconds=60, clock=clock)
        store.put("42", "c1", candidate, {"user": "1"})

        pending = store.pop("42", "c1")
        assert pending.candidate is candidate
        assert pending.params == {"user": "1"}
        assert store.pop("42", "c1") is None

    def test_keyed_by_author_and_channel(self, clock, candidate):
        """Test other authors or channels do not see the confirmation."""
        store = PendingConfirmationStore(ttl_seconds=60, clock=clock)
        store.put("42", "c1", candidate, {})

        assert store.pop("43", "c1") is None
        assert store.pop("42", "c2") is None
        assert len(store) == 1

    def test_expired(self, clock, candidate):
        """Test expired confirmations are dropped."""
        store = PendingConfirmationStore(ttl_seconds=60, clock=clock)
        store.put("42", "c1", candidate, {})
        clock.advance(61)

        assert store.pop("42", "c1") is None
        assert len(store) == 0

    def test_put_drops_unanswered_expired(self, clock, candidate):
        """Test unanswered confirmations from other keys are removed on put."""
        store = PendingConfirmationStore(ttl_seconds=60, clock=clock)
        store.put("42", "c1", candidate, {})
        store.put("43", "c2", candidate, {})
        clock.advance(61)

        store.put("44", "c3", candidate, {})

        assert len(store) == 1
        assert store.pop("44", "c3") is not None

    def test_sweep(self, clock, candidate):
        """Test sweep removes only expired confirmations."""
        store = PendingConfirmationStore(ttl_seconds=60, clock=clock)
        store.put("42", "c1", candidate, {})
        clock.advance(30)
        store.put("43", "c1", candidate, {})
        clock.advance(31)

        assert store.sweep() == 1
        assert store.pop("42", "c1") is None
        assert store.pop("43", "c1") is not None
