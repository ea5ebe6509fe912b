# commandless/core/context/store.py
"""Short-lived per-channel conversation memory.

Keeps the last few turns of every channel so the engine can tell whether
a message replies to the bot and can give the generative matcher a small
context block. Nothing is persisted; losing the store on restart only
costs context, never correctness.
"""

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from commandless.config import settings

logger = logging.getLogger(__name__)

PROMPT_RECENT_TURNS = 3


@dataclass
class ConversationTurn:
    """One message seen in a channel.

    Attributes:
        message_id: Platform message id.
        channel_id: Channel the message was posted in.
        author_id: Author id.
        content: Message text.
        timestamp: Epoch seconds when the turn was recorded.
        is_bot_authored: Whether the bot wrote the message.
    """

    message_id: str
    channel_id: str
    author_id: str
    content: str
    timestamp: float = field(default_factory=time.time)
    is_bot_authored: bool = False


@dataclass
class ConversationContext:
    """Context assembled for one utterance.

    Attributes:
        linked_turn: The turn the utterance replies to, if still remembered.
        recent_turns: Up to three most recent turns of the channel, oldest first.
    """

    linked_turn: ConversationTurn | None = None
    recent_turns: list[ConversationTurn] = field(default_factory=list)

    @property
    def is_reply_to_bot(self) -> bool:
        return self.linked_turn is not None and self.linked_turn.is_bot_authored

    @property
    def is_empty(self) -> bool:
        return self.linked_turn is None and not self.recent_turns


class ConversationContextStore:
    """Bounded ring buffer of turns per channel with a time-to-live.

    Each channel keeps at most ``capacity`` turns; appending past capacity
    evicts the oldest. Turns older than ``ttl_seconds`` are dropped by
    ``sweep()``, which also runs on every append. The store is explicitly
    constructed and owned by its caller.

    Args:
        capacity: Turns kept per channel.
        ttl_seconds: Turn lifetime in seconds.
        clock: Time source returning epoch seconds (injectable for tests).

    Example:
        >>> store = ConversationContextStore()
        >>> store.add_turn(ConversationTurn("m1", "c1", "bot", "Done!", is_bot_authored=True))
        >>> store.is_reply_to_bot("c1", "m1")
        True
    """

    def __init__(
        self,
        capacity: int | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.capacity = settings.context_capacity if capacity is None else capacity
        self.ttl_seconds = settings.context_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._channels: dict[str, deque[ConversationTurn]] = {}

    def add_turn(self, turn: ConversationTurn) -> None:
        """Append a turn to its channel buffer, evicting the oldest past capacity."""
        self.sweep()
        buffer = self._channels.get(turn.channel_id)
        if buffer is None:
            buffer = deque(maxlen=self.capacity)
            self._channels[turn.channel_id] = buffer
        buffer.append(turn)

    def record(
        self,
        channel_id: str,
        message_id: str,
        author_id: str,
        content: str,
        is_bot_authored: bool = False,
    ) -> ConversationTurn:
        """Build a turn stamped with the store clock and add it."""
        turn = ConversationTurn(
            message_id=message_id,
            channel_id=channel_id,
            author_id=author_id,
            content=content,
            timestamp=self._clock(),
            is_bot_authored=is_bot_authored,
        )
        self.add_turn(turn)
        return turn

    def sweep(self) -> int:
        """Drop expired turns and empty channels.

        Returns:
            Number of turns removed.
        """
        cutoff = self._clock() - self.ttl_seconds
        removed = 0
        for channel_id in list(self._channels):
            buffer = self._channels[channel_id]
            while buffer and buffer[0].timestamp < cutoff:
                buffer.popleft()
                removed += 1
            if not buffer:
                del self._channels[channel_id]
        if removed:
            logger.debug("Swept %d expired conversation turns", removed)
        return removed

    def get_turn(self, channel_id: str, message_id: str) -> ConversationTurn | None:
        """Find a live turn by message id."""
        cutoff = self._clock() - self.ttl_seconds
        for turn in self._channels.get(channel_id, ()):
            if turn.message_id == message_id and turn.timestamp >= cutoff:
                return turn
        return None

    def is_reply_to_bot(self, channel_id: str, message_id: str | None) -> bool:
        """True when ``message_id`` names a remembered bot-authored turn."""
        if not message_id:
            return False
        turn = self.get_turn(channel_id, message_id)
        return turn is not None and turn.is_bot_authored

    def recent(self, channel_id: str, limit: int = PROMPT_RECENT_TURNS) -> list[ConversationTurn]:
        """Most recent live turns of a channel, oldest first."""
        cutoff = self._clock() - self.ttl_seconds
        turns = [t for t in self._channels.get(channel_id, ()) if t.timestamp >= cutoff]
        return turns[-limit:] if limit > 0 else []

    def build_context(
        self, channel_id: str, reply_to_message_id: str | None = None
    ) -> ConversationContext:
        """Assemble the reply-linked turn and recent turns for one utterance."""
        linked = self.get_turn(channel_id, reply_to_message_id) if reply_to_message_id else None
        return ConversationContext(linked_turn=linked, recent_turns=self.recent(channel_id))

    def clear(self) -> None:
        """Forget every channel."""
        self._channels.clear()

    def __len__(self) -> int:
        return sum(len(buffer) for buffer in self._channels.values())
