"""Parameter extraction module.

This module provides:
- extract_parameters: Fill every slot a template pattern declares
- Per-slot extractors (user, reason, amount, duration, message, role)
- Mention parsing and the pluggable IdShape strategy for bare user ids
"""

from commandless.core.extraction.mentions import (
    IdShape,
    RegexIdShape,
    default_id_shape,
    find_user_mentions,
    mention_params,
    mention_target,
    strip_mentions,
)
from commandless.core.extraction.params import (
    extract_amount,
    extract_duration,
    extract_message,
    extract_parameters,
    extract_reason,
    extract_role,
    extract_user,
)

__all__ = [
    "IdShape",
    "RegexIdShape",
    "default_id_shape",
    "find_user_mentions",
    "mention_params",
    "mention_target",
    "strip_mentions",
    "extract_amount",
    "extract_duration",
    "extract_message",
    "extract_parameters",
    "extract_reason",
    "extract_role",
    "extract_user",
]
