"""Intent resolution module.

This module provides:
- IntentResolutionPolicy: Engine entry point (resolve, resolve_for_tenant,
  resolve_with_confirmation)
- Utterance / Author: Incoming message types
- Execute / Clarify / Converse: ResolutionDecision variants
- Yes/no helpers for one-step confirmation
"""

from commandless.core.resolution.confirmation import (
    PendingConfirmationStore,
    is_affirmative_response,
    is_negative_response,
)
from commandless.core.resolution.models import (
    Author,
    Clarify,
    Converse,
    Execute,
    ResolutionDecision,
    Utterance,
)
from commandless.core.resolution.policy import (
    IntentResolutionPolicy,
    ResolutionThresholds,
)
from commandless.core.resolution.responses import detect_conversational_intent

__all__ = [
    "PendingConfirmationStore",
    "is_affirmative_response",
    "is_negative_response",
    "Author",
    "Clarify",
    "Converse",
    "Execute",
    "ResolutionDecision",
    "Utterance",
    "IntentResolutionPolicy",
    "ResolutionThresholds",
    "detect_conversational_intent",
]
