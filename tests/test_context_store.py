# tests/test_context_store.py
"""Tests for per-channel conversation memory."""

from commandless.core.context.store import ConversationContextStore, ConversationTurn


class TestRingBuffer:
    """Tests for capacity and channel isolation."""

    def test_capacity_evicts_oldest(self, clock):
        """Test appending past capacity drops the oldest turn."""
        store = ConversationContextStore(capacity=3, ttl_seconds=600, clock=clock)
        for i in range(5):
            store.record("c1", f"m{i}", "42", f"message {i}")

        assert len(store) == 3
        assert store.get_turn("c1", "m0") is None
        assert store.get_turn("c1", "m1") is None
        assert store.get_turn("c1", "m4").content == "message 4"

    def test_channels_are_isolated(self, context_store):
        """Test turns are only visible in their own channel."""
        context_store.record("c1", "m1", "bot", "Done!", is_bot_authored=True)

        assert context_store.get_turn("c2", "m1") is None
        assert context_store.recent("c2") == []

    def test_add_turn_keeps_given_timestamp(self, context_store, clock):
        """Test add_turn stores a prebuilt turn as-is."""
        turn = ConversationTurn("m9", "c1", "7", "hello", timestamp=clock())
        context_store.add_turn(turn)
        assert context_store.get_turn("c1", "m9") is turn


class TestExpiry:
    """Tests for time-to-live handling."""

    def test_sweep_removes_expired_turns(self, context_store, clock):
        """Test turns older than the TTL are swept."""
        context_store.record("c1", "m1", "42", "old")
        clock.advance(7201)
        context_store.record("c2", "m2", "42", "new")

        assert context_store.get_turn("c1", "m1") is None
        assert len(context_store) == 1

    def test_sweep_returns_count(self, context_store, clock):
        """Test sweep reports how many turns it removed."""
        context_store.record("c1", "m1", "42", "a")
        context_store.record("c1", "m2", "42", "b")
        clock.advance(7201)

        assert context_store.sweep() == 2
        assert len(context_store) == 0

    def test_expired_turn_not_returned_before_sweep(self, context_store, clock):
        """Test lookups ignore expired turns even before a sweep runs."""
        context_store.record("c1", "m1", "bot", "Done!", is_bot_authored=True)
        clock.advance(7201)

        assert context_store.get_turn("c1", "m1") is None
        assert not context_store.is_reply_to_bot("c1", "m1")


class TestReplies:
    """Tests for reply detection and context assembly."""

    def test_is_reply_to_bot(self, context_store):
        """Test only bot-authored turns count as replies to the bot."""
        context_store.record("c1", "m1", "bot", "Who should I ban?", is_bot_authored=True)
        context_store.record("c1", "m2", "42", "this one")

        assert context_store.is_reply_to_bot("c1", "m1")
        assert not context_store.is_reply_to_bot("c1", "m2")
        assert not context_store.is_reply_to_bot("c1", "missing")
        assert not context_store.is_reply_to_bot("c1", None)

    def test_recent_returns_last_three_oldest_first(self, context_store):
        """Test recent turns are the tail of the buffer in order."""
        for i in range(5):
            context_store.record("c1", f"m{i}", "42", f"message {i}")

        assert [t.message_id for t in context_store.recent("c1")] == ["m2", "m3", "m4"]
        assert context_store.recent("c1", limit=0) == []

    def test_build_context(self, context_store):
        """Test the linked turn and recent turns are assembled."""
        context_store.record("c1", "m1", "bot", "Who should I ban?", is_bot_authored=True)
        context_store.record("c1", "m2", "42", "the spammer")

        context = context_store.build_context("c1", reply_to_message_id="m1")

        assert context.linked_turn.content == "Who should I ban?"
        assert context.is_reply_to_bot
        assert [t.message_id for t in context.recent_turns] == ["m1", "m2"]

    def test_build_context_empty_channel(self, context_store):
        """Test an unknown channel yields an empty context."""
        context = context_store.build_context("nowhere", reply_to_message_id="m1")
        assert context.is_empty
        assert not context.is_reply_to_bot

    def test_clear(self, context_store):
        """Test clear forgets every channel."""
        context_store.record("c1", "m1", "42", "a")
        context_store.record("c2", "m2", "42", "b")
        context_store.clear()

        assert len(context_store) == 0
