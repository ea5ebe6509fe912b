"""One-step yes/no confirmation support for the strict resolver."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from commandless.config import settings
from commandless.core.matching.base import MatchCandidate

logger = logging.getLogger(__name__)

AFFIRMATIVE_RESPONSES = (
    "yes", "yeah", "yep", "yup", "sure", "correct", "right", "absolutely",
    "confirm", "confirmed", "ok", "okay", "y", "ye", "ya", "yea", "indeed",
    "affirmative", "certainly", "definitely", "exactly", "👍", "yes please",
    "that's right", "that is right", "that's correct", "that is correct",
)
NEGATIVE_RESPONSES = (
    "no", "nope", "nah", "negative", "never", "not", "n", "wrong", "incorrect",
    "noo", "nooo", "no way", "definitely not", "absolutely not", "👎",
    "no thanks", "that's wrong", "that is wrong", "that's incorrect", "that is incorrect",
)


def _matches_any(message: str, responses: tuple[str, ...]) -> bool:
    normalized = message.strip().lower().rstrip(".!?")
    return any(
        normalized == response or normalized.startswith(response + " ")
        for response in responses
    )


def is_negative_response(message: str) -> bool:
    """True when a follow-up reply declines ("no", "nope", "absolutely not" ...)."""
    return _matches_any(message, NEGATIVE_RESPONSES)


def is_affirmative_response(message: str) -> bool:
    """True when a follow-up reply confirms ("yes", "sure", "ok" ...).

    Negative phrases win, so "definitely not" is never affirmative.

    Example:
        >>> is_affirmative_response("yes please!")
        True
        >>> is_affirmative_response("definitely not")
        False
    """
    if is_negative_response(message):
        return False
    return _matches_any(message, AFFIRMATIVE_RESPONSES)


@dataclass
class PendingConfirmation:
    """A candidate awaiting a yes/no answer."""

    candidate: MatchCandidate
    params: dict[str, str]
    expires_at: float


class PendingConfirmationStore:
    """Pending confirmations keyed by (author, channel), each with a TTL.

    Args:
        ttl_seconds: Lifetime of a pending confirmation.
        clock: Time source returning epoch seconds.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = (
            settings.confirmation_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock
        self._pending: dict[tuple[str, str], PendingConfirmation] = {}

    def put(
        self, author_id: str, channel_id: str, candidate: MatchCandidate, params: dict[str, str]
    ) -> None:
        """Remember a candidate for the author and channel, replacing any older one.

        Expired entries for other authors and channels are dropped first.
        """
        self.sweep()
        self._pending[(author_id, channel_id)] = PendingConfirmation(
            candidate=candidate,
            params=dict(params),
            expires_at=self._clock() + self.ttl_seconds,
        )

    def pop(self, author_id: str, channel_id: str) -> PendingConfirmation | None:
        """Remove and return the live pending confirmation, if any."""
        pending = self._pending.pop((author_id, channel_id), None)
        if pending is None:
            return None
        if pending.expires_at < self._clock():
            logger.debug("Pending confirmation for %s in %s expired", author_id, channel_id)
            return None
        return pending

    def sweep(self) -> int:
        """Drop expired confirmations.

        Returns:
            Number of confirmations removed.
        """
        now = self._clock()
        expired = [key for key, pending in self._pending.items() if pending.expires_at < now]
        for key in expired:
            del self._pending[key]
        if expired:
            logger.debug("Swept %d expired confirmations", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
