"""Canned conversational replies keyed on detected conversational intent."""

import re

from commandless.core.matching.text import GREETING_PATTERNS, normalize_input
from commandless.core.templates.models import CommandTemplate

INTENT_GREETING = "greeting"
INTENT_STATUS = "status"
INTENT_HELP = "help"
INTENT_GENERIC = "generic"
INTENT_NO_TEMPLATES = "no_templates"
INTENT_MODEL = "model"
INTENT_CANCELLED = "cancelled"

HELP_LIST_LIMIT = 5

NO_TEMPLATES_REPLY = "Hi there! I don't have any commands configured yet, but I'm happy to chat!"
GREETING_REPLY = "Hello! How can I help you today? I can help with moderation commands or just chat!"
STATUS_REPLY = "I'm here and ready to help! Feel free to ask me anything or give me a command."
GENERIC_REPLY = "I'm here to help! You can chat with me or give me moderation commands."
CANCELLED_REPLY = "Okay, I won't do that."

HELP_PATTERNS = [
    re.compile(r"\bhelp\b"),
    re.compile(r"\bwhat can you do\b"),
    re.compile(r"\bwhat do you do\b"),
    re.compile(r"\b(?:list|show)(?: me)?(?: your| the)? commands\b"),
    re.compile(r"^commands\??$"),
]
STATUS_PATTERNS = [
    re.compile(r"\bare you (?:there|working|online|alive|up)\b"),
    re.compile(r"\byou (?:there|up)\?"),
    re.compile(r"\bstatus\b"),
]


def detect_conversational_intent(text: str) -> str:
    """Classify small talk as help, greeting, status or generic.

    Example:
        >>> detect_conversational_intent("hey what can you do?")
        'help'
        >>> detect_conversational_intent("hey how are you")
        'greeting'
        >>> detect_conversational_intent("are you working?")
        'status'
    """
    normalized = normalize_input(text)
    if any(p.search(normalized) for p in HELP_PATTERNS):
        return INTENT_HELP
    if any(p.search(normalized) for p in GREETING_PATTERNS):
        return INTENT_GREETING
    if any(p.search(normalized) for p in STATUS_PATTERNS):
        return INTENT_STATUS
    return INTENT_GENERIC


def help_reply(templates: list[CommandTemplate]) -> str:
    """List up to five template names."""
    names = [t.name for t in templates[:HELP_LIST_LIMIT]]
    if not names:
        return NO_TEMPLATES_REPLY
    listing = ", ".join(names)
    if len(templates) > HELP_LIST_LIMIT:
        listing += ", and more"
    return f"I can help with: {listing}. Just tell me what you need in your own words!"


def canned_reply(intent: str, templates: list[CommandTemplate]) -> str:
    """Reply text for a detected conversational intent."""
    if intent == INTENT_HELP:
        return help_reply(templates)
    if intent == INTENT_STATUS:
        return STATUS_REPLY
    if intent == INTENT_GREETING:
        return GREETING_REPLY
    return GENERIC_REPLY
