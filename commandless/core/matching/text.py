"""Text normalisation and fuzzy-comparison helpers shared by the matchers."""

import re

from commandless.core.extraction.mentions import strip_mentions

CONTRACTIONS = {
    "can't": "cannot",
    "won't": "will not",
    "don't": "do not",
    "didn't": "did not",
    "isn't": "is not",
    "aren't": "are not",
    "wasn't": "was not",
    "weren't": "were not",
    "hasn't": "has not",
    "haven't": "have not",
    "hadn't": "had not",
    "shouldn't": "should not",
    "wouldn't": "would not",
    "couldn't": "could not",
    "tbh": "to be honest",
    "pls": "please",
    "plz": "please",
    "msgs": "messages",
    "msg": "message",
    "u": "you",
    "ur": "your",
    "gimme": "give me",
    "gonna": "going to",
    "wanna": "want to",
}

TYPO_CORRECTIONS = {
    "wan": "warn",
    "bna": "ban",
    "maek": "make",
    "pruge": "purge",
    "sya": "say",
    "mesages": "messages",
    "becuase": "because",
    "spaming": "spamming",
}

_REPLACEMENTS = [
    (re.compile(rf"(?<![\w']){re.escape(source)}(?![\w'])"), target)
    for source, target in {**CONTRACTIONS, **TYPO_CORRECTIONS}.items()
]

GREETING_PATTERNS = [
    re.compile(r"^(?:hello|hi|hey|good morning|good afternoon|good evening|greetings)\b"),
    re.compile(r"\bhow are you\b"),
    re.compile(r"\bwhat'?s up\b"),
    re.compile(r"\bsup\b"),
    re.compile(r"^(?:thanks|thank you|thx)\b"),
    re.compile(r"^(?:bye|goodbye|see you|cya)\b"),
]

COMMAND_INDICATORS = (
    "warn",
    "ban",
    "kick",
    "mute",
    "timeout",
    "remove",
    "delete",
    "purge",
    "pin",
    "say",
    "note",
    "role",
    "slowmode",
    "ping",
    "latency",
    "speed",
)

INVALID_COMPOUND_RE = re.compile(r"\b(?:warn|ban|kick|mute)(?:ban|warn|kick|mute)\b")

POLITENESS_MARKERS = (
    "please",
    "can you",
    "could you",
    "would you",
    "how",
    "what",
    "why",
    "they are",
    "user is",
    "being",
    "getting",
    "remove them",
    "get rid",
)

WORD_RE = re.compile(r"[a-z0-9']+")


def normalize_input(text: str) -> str:
    """Lower-case, drop mention tokens, expand contractions and fix common typos.

    Example:
        >>> normalize_input("Pls BNA <@1> ur spaming")
        'please ban your spamming'
    """
    normalized = strip_mentions(text).lower()
    for pattern, replacement in _REPLACEMENTS:
        normalized = pattern.sub(replacement, normalized)
    return " ".join(normalized.split())


def tokenize(text: str) -> list[str]:
    """Split normalised text into word tokens."""
    return WORD_RE.findall(text.lower())


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
            )
        previous = current
    return previous[-1]


def levenshtein_similarity(a: str, b: str) -> float:
    """Similarity in [0, 1]: (maxLen - distance) / maxLen.

    Two empty strings are identical (1.0).

    Example:
        >>> levenshtein_similarity("warn", "wran")
        0.5
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest


def words_match(a: str, b: str, threshold: float) -> bool:
    """Fuzzy word equality: containment either way or similarity above threshold.

    Containment only counts for words longer than two characters so
    fragments like "a" or "to" do not match everything.
    """
    if a == b:
        return True
    if len(a) > 2 and len(b) > 2 and (a in b or b in a):
        return True
    return levenshtein_similarity(a, b) > threshold


def contains_word_prefix(text: str, word: str) -> bool:
    """True when ``word`` starts a word somewhere in ``text``."""
    if not word:
        return False
    return re.search(rf"\b{re.escape(word)}", text) is not None


def is_invalid_compound(text: str) -> bool:
    """Detect two action verbs glued together ("warnban", "kickmute")."""
    return INVALID_COMPOUND_RE.search(text.lower()) is not None


def is_conversational_input(text: str, extra_indicators: tuple[str, ...] = ()) -> bool:
    """True for greetings/small talk that carry no command indicator.

    Args:
        text: Normalised utterance.
        extra_indicators: Additional command words (e.g. the tenant's
            template command names) that mark command intent.
    """
    lower = text.lower().strip()
    if not any(pattern.search(lower) for pattern in GREETING_PATTERNS):
        return False

    indicators = COMMAND_INDICATORS + tuple(i for i in extra_indicators if i)
    return not any(contains_word_prefix(lower, indicator) for indicator in indicators)


def has_politeness_markers(text: str) -> bool:
    """True when the utterance contains politeness or indirection markers."""
    lower = text.lower()
    return any(
        re.search(rf"\b{re.escape(marker)}\b", lower) for marker in POLITENESS_MARKERS
    )
