# commandless/core/extraction/params.py
"""Slot extraction from free-form command text.

One pure, total function per slot. Every extractor returns None when the
slot cannot be filled; callers substitute the documented default.
Extraction runs on the original message text so quoted messages and role
names keep their case.
"""

import re

from commandless.core.extraction.mentions import (
    IdShape,
    default_id_shape,
    mention_target,
    strip_mentions,
)
from commandless.core.templates.rendering import placeholders

# Ordered reason patterns: first match with more than 2 characters wins
REASON_PATTERNS = [
    re.compile(r"\b(?:for|because|due to)\s+(.+)$", re.IGNORECASE),
    re.compile(r"\breason:\s*(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:they|user|he|she)\s+(?:keeps?|is|are|was|were)\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:they|user|he|she)\s+(?:has|have)\s+been\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:since|as)\s+(?:they|user|he|she)\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:theyre|they're)\s+(.+)$", re.IGNORECASE),
    re.compile(r"\bcaught\s+(.+)$", re.IGNORECASE),
    re.compile(r"\bkeeps?\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:always|constantly|continuously)\s+(.+)$", re.IGNORECASE),
    re.compile(r"\b(?:being|getting)\s+(.+)$", re.IGNORECASE),
]
REASON_PREFIX_RE = re.compile(r"^(?:are|is|was|were)\s+", re.IGNORECASE)
TRAILING_NOISE_RE = re.compile(r"(?:[\s,]+(?:please|pls|thanks|thank you|thx))?[\s.!?]*$", re.IGNORECASE)

BEHAVIOR_KEYWORDS = [
    "toxic",
    "spamming",
    "harassment",
    "trolling",
    "annoying",
    "rude",
    "inappropriate",
    "disruptive",
    "offensive",
    "abusive",
]

AMOUNT_PATTERNS = [
    re.compile(r"(\d+)\s*(?:messages?|msgs?)\b", re.IGNORECASE),
    re.compile(r"\b(?:about|around|approximately|roughly)\s+(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)"),
]

WORD_NUMBERS = {
    "one": "1",
    "two": "2",
    "three": "3",
    "four": "4",
    "five": "5",
    "six": "6",
    "seven": "7",
    "eight": "8",
    "nine": "9",
    "ten": "10",
    "fifteen": "15",
    "twenty": "20",
    "thirty": "30",
    "fifty": "50",
    "hundred": "100",
}

DURATION_RE = re.compile(
    r"\b(\d+)\s*(seconds?|secs?|s|minutes?|mins?|m|hours?|hrs?|h|days?|d)\b",
    re.IGNORECASE,
)

MESSAGE_PATTERNS = [
    re.compile(r"(?:^|\s)\"([^\"]+)\"(?=$|[\s.,!?])"),
    re.compile(r"(?:^|\s)'([^']+)'(?=$|[\s.,!?])"),
    re.compile(r"“([^”]+)”"),
    re.compile(
        r"\b(?:say|announce|broadcast|tell everyone|tell)\s+(?:that\s+)?(.+)$",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:message|note):\s*(.+)$", re.IGNORECASE),
]

ROLE_NAMES = {
    "administrator": "admin",
    "admin": "admin",
    "moderator": "moderator",
    "mod": "moderator",
    "member": "member",
    "vip": "vip",
}
ROLE_PHRASE_RE = re.compile(
    r"\b(?:give|add|assign|grant)\s+(?:them\s+|him\s+|her\s+)?(?:the\s+|a\s+|an\s+)?(.+?)\s+(?:role|roles|permissions?)\b",
    re.IGNORECASE,
)


def _clean_tail(value: str) -> str:
    return TRAILING_NOISE_RE.sub("", value.strip()).strip()


def extract_user(
    text: str,
    mentions: list[str] | None = None,
    *,
    allow_bare_id: bool = False,
    id_shape: IdShape | None = None,
) -> str | None:
    """Extract the target user id.

    Precedence: platform mention id, then mention syntax in the text, then
    (only when ``allow_bare_id`` is set, i.e. the template declares
    ``{user}``) a bare id recognised by the id-shape strategy.

    Example:
        >>> extract_user("ban <@123> for spamming")
        '123'
        >>> extract_user("ban 560079402013032448", allow_bare_id=True)
        '560079402013032448'
    """
    if mentions:
        return str(mentions[0])

    target = mention_target(text)
    if target:
        return target

    if allow_bare_id:
        shape = id_shape or default_id_shape()
        return shape.find(strip_mentions(text))

    return None


def extract_reason(text: str) -> str | None:
    """Extract a moderation reason.

    Example:
        >>> extract_reason("warn <@999> for being annoying")
        'being annoying'
    """
    cleaned = strip_mentions(text)

    for pattern in REASON_PATTERNS:
        match = pattern.search(cleaned)
        if not match:
            continue
        reason = REASON_PREFIX_RE.sub("", _clean_tail(match.group(1)))
        if len(reason) > 2:
            return reason

    lower = cleaned.lower()
    for keyword in BEHAVIOR_KEYWORDS:
        if re.search(rf"\b{keyword}\b", lower):
            return keyword

    return None


def extract_amount(text: str) -> str | None:
    """Extract a raw count as a string of digits.

    The value is not clamped; callers apply their own maximum.

    Example:
        >>> extract_amount("can you please delete like 5 messages")
        '5'
        >>> extract_amount("clear fifteen messages")
        '15'
    """
    cleaned = strip_mentions(text)

    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            return match.group(1)

    lower = cleaned.lower()
    for word, number in WORD_NUMBERS.items():
        if re.search(rf"\b{word}\b", lower):
            return number

    return None


def extract_duration(text: str) -> str | None:
    """Extract a ``<n><unit>`` duration with unit s, m, h or d.

    Example:
        >>> extract_duration("mute them for 10 minutes")
        '10m'
        >>> extract_duration("timeout <@1> 2h")
        '2h'
    """
    match = DURATION_RE.search(strip_mentions(text))
    if not match:
        return None
    return f"{match.group(1)}{match.group(2)[0].lower()}"


def extract_message(text: str) -> str | None:
    """Extract message content.

    Precedence: quoted span, text after say/tell/announce, text after
    ``message:`` or ``note:``.

    Example:
        >>> extract_message("tell everyone 'meeting moved to 3pm'")
        'meeting moved to 3pm'
    """
    for pattern in MESSAGE_PATTERNS:
        match = pattern.search(text)
        if match:
            message = match.group(1).strip()
            if message:
                return message
    return None


def extract_role(text: str) -> str | None:
    """Extract a role name.

    Canonical role names win; otherwise the words between
    give/add/assign/grant and role/permissions are used.

    Example:
        >>> extract_role("make them a mod")
        'moderator'
        >>> extract_role("give <@1> the DJ role")
        'DJ'
    """
    cleaned = strip_mentions(text)
    lower = cleaned.lower()

    for name, canonical in ROLE_NAMES.items():
        if re.search(rf"\b{name}s?\b", lower):
            return canonical

    match = ROLE_PHRASE_RE.search(cleaned)
    if match and match.group(1).strip():
        return match.group(1).strip()

    return None


SLOT_EXTRACTORS = {
    "reason": extract_reason,
    "amount": extract_amount,
    "duration": extract_duration,
    "message": extract_message,
    "role": extract_role,
}


def extract_parameters(
    text: str,
    pattern: str,
    mentions: list[str] | None = None,
    id_shape: IdShape | None = None,
) -> dict[str, str]:
    """Extract every slot the pattern declares.

    Args:
        text: Original message text.
        pattern: Template natural-language pattern.
        mentions: Platform-reported mentioned user ids.
        id_shape: Bare-id strategy used for the ``{user}`` fallback.

    Returns:
        Mapping of placeholder to extracted value; misses are omitted.

    Example:
        >>> extract_parameters("ban <@123> for spamming", "ban {user} for {reason}")
        {'user': '123', 'reason': 'spamming'}
    """
    slots = placeholders(pattern)
    params: dict[str, str] = {}

    if "user" in slots or mentions:
        user = extract_user(
            text, mentions, allow_bare_id="user" in slots, id_shape=id_shape
        )
        if user:
            params["user"] = user

    for slot in slots:
        extractor = SLOT_EXTRACTORS.get(slot)
        if extractor is None:
            continue
        value = extractor(text)
        if value:
            params[slot] = value

    return params
