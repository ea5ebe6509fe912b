"""Platform mention syntax and user-id shape strategies.

Mentions arrive as ``<@123>`` / ``<@!123>`` (user), ``<#123>`` (channel)
and ``<@&123>`` (role). Bare ids are recognised through an ``IdShape``
strategy so the engine does not hard-code one platform's id format.
"""

import re
from typing import Protocol, runtime_checkable

from commandless.config import settings

USER_MENTION_RE = re.compile(r"<@!?(\d+)>")
CHANNEL_MENTION_RE = re.compile(r"<#(\d+)>")
ROLE_MENTION_RE = re.compile(r"<@&(\d+)>")
ANY_MENTION_RE = re.compile(r"<(?:@[!&]?|#)\d+>")


@runtime_checkable
class IdShape(Protocol):
    """Strategy recognising a bare platform user id inside free text."""

    def find(self, text: str) -> str | None:
        """Return the first id-shaped token in text, or None."""
        ...


class RegexIdShape:
    """IdShape backed by a regular expression.

    The first capture group is returned when the pattern has one,
    otherwise the whole match.

    Example:
        >>> RegexIdShape(r"\\b(\\d{17,19})\\b").find("ban 560079402013032448 now")
        '560079402013032448'
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self._regex = re.compile(pattern)

    def find(self, text: str) -> str | None:
        match = self._regex.search(text)
        if not match:
            return None
        return match.group(1) if match.groups() else match.group(0)


def default_id_shape() -> RegexIdShape:
    """IdShape built from settings.user_id_pattern (Discord snowflakes by default)."""
    return RegexIdShape(settings.user_id_pattern)


def find_user_mentions(text: str) -> list[str]:
    """Return user ids of all ``<@id>`` mentions in order."""
    return USER_MENTION_RE.findall(text)


def mention_target(text: str) -> str | None:
    """Pick the user a message is about from its mention syntax.

    When several users are mentioned and the message starts with a
    mention, the leading one addresses the bot and the next is the target.

    Example:
        >>> mention_target("<@1> ban <@2> for spam")
        '2'
        >>> mention_target("warn <@3>")
        '3'
    """
    ids = find_user_mentions(text)
    if not ids:
        return None
    if len(ids) > 1 and USER_MENTION_RE.match(text.strip()):
        return ids[1]
    return ids[0]


def strip_mentions(text: str) -> str:
    """Remove all mention tokens and collapse whitespace."""
    return " ".join(ANY_MENTION_RE.sub(" ", text).split())


def mention_params(text: str, mentions: list[str] | None = None) -> dict[str, str]:
    """Parameters derived from platform mentions.

    Args:
        text: Raw message content.
        mentions: Mentioned user ids reported by the platform (bot excluded).

    Returns:
        Mapping with ``user``, ``channel`` and ``role`` where present.
    """
    params: dict[str, str] = {}

    if mentions:
        params["user"] = str(mentions[0])

    channel = CHANNEL_MENTION_RE.search(text)
    if channel:
        params["channel"] = channel.group(1)

    role = ROLE_MENTION_RE.search(text)
    if role:
        params["role"] = role.group(1)

    return params
