"""Conversation context module.

This module provides:
- ConversationTurn: One remembered message
- ConversationContext: Reply-linked turn plus recent turns for one utterance
- ConversationContextStore: Bounded, expiring per-channel turn buffers
"""

from commandless.core.context.store import (
    ConversationContext,
    ConversationContextStore,
    ConversationTurn,
)

__all__ = [
    "ConversationContext",
    "ConversationContextStore",
    "ConversationTurn",
]
