"""Intent matching module.

This module provides:
- Matcher: Common matcher protocol; MatchCandidate / MatchResult types
- HeuristicMatcher: Deterministic weighted lexical matcher
- LLMMatcher: Generative matcher with lenient response parsing
- TextGenerator / LiteLLMGenerator: Model clients used by LLMMatcher
"""

from commandless.core.matching.base import (
    MatchCandidate,
    Matcher,
    MatchResult,
    rank_candidates,
)
from commandless.core.matching.generation import (
    LiteLLMGenerator,
    TextGenerator,
    default_generator,
)
from commandless.core.matching.heuristic import HeuristicMatcher
from commandless.core.matching.llm import (
    LLMMatcher,
    ModelIntentResponse,
    extract_first_json_object,
    parse_model_response,
)
from commandless.core.matching.prompts import build_intent_prompt
from commandless.core.matching.text import (
    levenshtein_similarity,
    normalize_input,
)

__all__ = [
    "MatchCandidate",
    "Matcher",
    "MatchResult",
    "rank_candidates",
    "LiteLLMGenerator",
    "TextGenerator",
    "default_generator",
    "HeuristicMatcher",
    "LLMMatcher",
    "ModelIntentResponse",
    "extract_first_json_object",
    "parse_model_response",
    "build_intent_prompt",
    "levenshtein_similarity",
    "normalize_input",
]
