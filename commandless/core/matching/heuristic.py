# commandless/core/matching/heuristic.py
"""Deterministic lexical matcher.

Scores an utterance against each template with weighted signals:

1. 0.8 if the utterance contains the template's command name
2. 0.7 x curated phrase score (verbatim phrase 1.0, else partial credit)
3. 0.5 x fraction of pattern content words fuzzily present
4. 0.4 x fraction of the command's semantic keywords present
5. 0.2 x description word overlap

The sum is capped at 1.0. No I/O, no randomness: identical input always
yields identical ranked candidates.
"""

import logging

from commandless.config import settings
from commandless.core.extraction.mentions import IdShape
from commandless.core.extraction.params import extract_parameters
from commandless.core.matching.base import MatchCandidate, MatchResult, rank_candidates
from commandless.core.matching.text import (
    contains_word_prefix,
    has_politeness_markers,
    is_conversational_input,
    is_invalid_compound,
    levenshtein_similarity,
    normalize_input,
    tokenize,
    words_match,
)
from commandless.core.templates.models import CommandTemplate
from commandless.core.templates.rendering import strip_placeholders

logger = logging.getLogger(__name__)

NAME_WEIGHT = 0.8
PHRASE_WEIGHT = 0.7
PATTERN_WEIGHT = 0.5
KEYWORD_WEIGHT = 0.4
DESCRIPTION_WEIGHT = 0.2

PARTIAL_PHRASE_CREDIT = 0.8
PHRASE_WORD_SIMILARITY = 0.8
PATTERN_WORD_SIMILARITY = 0.7
DESCRIPTION_WORD_SIMILARITY = 0.8

PHRASE_STOPWORDS = frozenset({
    "a", "an", "the", "to", "of", "for", "and", "or", "with", "is", "are", "be",
    "can", "could", "would", "will", "you", "me", "my", "please",
    "them", "they", "him", "her", "it", "this", "that", "all", "out", "up",
    "what", "how", "do",
})

PHRASE_PATTERNS: dict[str, list[str]] = {
    "ban": [
        "please remove", "can you remove", "get rid of", "kick out",
        "ban them", "remove them", "they need to go", "take them out",
        "eliminate user", "delete user", "boot them", "yeet them",
    ],
    "kick": [
        "kick them out", "boot them", "throw them out", "remove temporarily",
        "get them out of here", "make them leave",
    ],
    "warn": [
        "give warning", "issue warning", "warn them", "tell them off",
        "let them know", "give them warning", "issue them warning",
    ],
    "mute": [
        "silence them", "make them quiet", "shut them up", "time them out",
        "timeout user", "stop them talking", "prevent them speaking",
    ],
    "ping": [
        "how fast", "how quick", "response time", "check speed", "test ping",
        "check latency", "what is ping", "how responsive", "speed test",
        "performance check", "reaction time", "speed of",
    ],
    "say": [
        "tell everyone", "announce to all", "let everyone know", "inform all",
        "broadcast message", "share with everyone", "make announcement",
    ],
    "purge": [
        "delete messages", "clear messages", "clean up messages", "remove messages",
        "clear chat", "clean chat", "wipe messages", "get rid of messages",
    ],
    "pin": [
        "pin this message", "stick this", "pin the message", "keep this visible",
        "make this permanent", "attach this message", "save this message",
    ],
    "note": [
        "make note", "add note", "take note", "write down", "record this",
        "remember this", "document this", "keep track of",
    ],
    "role": [
        "give role", "add role", "assign role", "make admin", "promote to",
        "give permissions", "assign permissions", "grant role",
    ],
}

SEMANTIC_KEYWORDS: dict[str, list[str]] = {
    "warn": [
        "warn", "warning", "caution", "alert", "notify",
        "give warning", "issue warning", "send warning", "warn them",
        "tell them", "let them know", "inform them", "remind them",
    ],
    "ban": [
        "ban", "remove", "banish", "exile", "expel", "eject", "delete",
        "kick out", "get rid of", "throw out", "boot out", "yeet",
        "remove them", "get them out", "make them leave", "eliminate",
        "take them out", "remove from server", "ban from server",
    ],
    "kick": [
        "kick", "boot", "eject", "throw out", "remove temporarily",
        "kick out", "boot them", "throw them out",
        "make them leave temporarily", "remove for now",
    ],
    "mute": [
        "mute", "silence", "timeout", "quiet", "shush", "hush",
        "time out", "shut up", "make quiet", "silence them",
        "stop them talking", "prevent them speaking", "calm them down",
    ],
    "note": [
        "note", "record", "remember", "document", "write", "log",
        "make note", "add note", "take note", "write down",
        "keep track", "make record", "document this", "remember that",
    ],
    "say": [
        "say", "tell", "announce", "broadcast", "declare", "proclaim",
        "tell everyone", "let everyone know", "make announcement",
        "inform everyone", "share with everyone", "communicate to all",
    ],
    "purge": [
        "purge", "delete", "clear", "clean", "remove", "wipe",
        "clean up", "get rid of", "clear out", "delete messages",
        "remove messages", "clean messages", "clear chat",
    ],
    "pin": [
        "pin", "stick", "attach", "fix", "secure", "fasten",
        "pin message", "stick message", "pin this", "pin above",
        "keep this visible", "make this permanent", "save this message",
    ],
    "ping": [
        "ping", "latency", "speed", "delay", "lag",
        "response", "fast", "quick", "time", "ms", "milliseconds",
        "how fast", "how quick", "response time", "reaction time",
        "check speed", "test speed", "check latency", "test ping",
        "how responsive", "performance check", "speed test",
    ],
    "role": [
        "role", "permission", "rank", "status", "position",
        "give", "add", "assign", "grant", "promote", "elevate",
        "admin", "moderator", "mod", "member", "vip",
        "give role", "add role", "assign role", "make admin",
        "promote to", "give permissions", "make them", "assign them",
    ],
}


def phrase_score(text: str, phrases: list[str]) -> float:
    """Best phrase score: 1.0 for a verbatim phrase, else partial word credit.

    Partial credit is (matched content words / content words) x 0.8;
    function words such as "can", "you" or "them" earn nothing on their own.
    """
    tokens = tokenize(text)
    best = 0.0
    for phrase in phrases:
        if contains_word_prefix(text, phrase):
            return 1.0
        phrase_words = [w for w in phrase.split() if w not in PHRASE_STOPWORDS]
        if not phrase_words or not tokens:
            continue
        matched = sum(
            1
            for word in phrase_words
            if any(words_match(token, word, PHRASE_WORD_SIMILARITY) for token in tokens)
        )
        best = max(best, matched / len(phrase_words) * PARTIAL_PHRASE_CREDIT)
    return best


class HeuristicMatcher:
    """Weighted lexical matcher used as the fallback (or only) matcher.

    Args:
        threshold: Acceptance threshold for terse input.
        polite_threshold: Acceptance threshold when politeness markers are present.
        id_shape: Bare-id strategy passed to parameter extraction.

    Example:
        >>> matcher = HeuristicMatcher()
        >>> candidates = matcher.rank("ban <@123> for spamming", templates)
        >>> candidates[0].params
        {'user': '123', 'reason': 'spamming'}
    """

    name = "heuristic"

    def __init__(
        self,
        threshold: float | None = None,
        polite_threshold: float | None = None,
        id_shape: IdShape | None = None,
        phrase_patterns: dict[str, list[str]] | None = None,
        semantic_keywords: dict[str, list[str]] | None = None,
    ) -> None:
        self.threshold = settings.heuristic_threshold if threshold is None else threshold
        self.polite_threshold = (
            settings.heuristic_polite_threshold
            if polite_threshold is None
            else polite_threshold
        )
        self.id_shape = id_shape
        self.phrase_patterns = PHRASE_PATTERNS if phrase_patterns is None else phrase_patterns
        self.semantic_keywords = (
            SEMANTIC_KEYWORDS if semantic_keywords is None else semantic_keywords
        )

    def acceptance_threshold(self, text: str) -> float:
        """Context-sensitive threshold: lower for polite or indirect phrasing."""
        if has_politeness_markers(normalize_input(text)):
            return self.polite_threshold
        return self.threshold

    def is_rejected(self, text: str, templates: list[CommandTemplate]) -> bool:
        """True for glued action verbs or small talk without command intent."""
        normalized = normalize_input(text)
        if not normalized:
            return True
        if is_invalid_compound(normalized):
            return True
        names = tuple(t.command_name for t in templates)
        return is_conversational_input(normalized, names)

    def score(self, normalized: str, template: CommandTemplate) -> float:
        """Uncapped weighted score of a normalised utterance against one template."""
        command_name = template.command_name
        tokens = tokenize(normalized)
        score = 0.0

        if contains_word_prefix(normalized, command_name):
            score += NAME_WEIGHT

        phrases = list(self.phrase_patterns.get(command_name, []))
        phrases += [strip_placeholders(alias).lower() for alias in template.aliases]
        phrases = [p for p in phrases if p]
        if phrases:
            score += phrase_score(normalized, phrases) * PHRASE_WEIGHT

        pattern_words = [
            word
            for word in tokenize(strip_placeholders(template.natural_language_pattern))
            if len(word) > 2
        ]
        if pattern_words:
            common = [
                token
                for token in tokens
                if any(words_match(token, word, PATTERN_WORD_SIMILARITY) for word in pattern_words)
            ]
            score += min(len(common) / len(pattern_words), 1.0) * PATTERN_WEIGHT

        keywords = self.semantic_keywords.get(command_name, [command_name])
        if keywords:
            hits = [k for k in keywords if contains_word_prefix(normalized, k)]
            score += len(hits) / len(keywords) * KEYWORD_WEIGHT

        if template.description:
            description_words = tokenize(template.description)
            if description_words:
                matches = [
                    token
                    for token in tokens
                    if any(
                        levenshtein_similarity(token, word) > DESCRIPTION_WORD_SIMILARITY
                        for word in description_words
                    )
                ]
                score += min(len(matches) / len(description_words), 1.0) * DESCRIPTION_WEIGHT

        return score

    def rank(
        self,
        text: str,
        templates: list[CommandTemplate],
        mentions: list[str] | None = None,
    ) -> list[MatchCandidate]:
        """Score every template and return positive-scoring candidates, best first.

        Returns an empty list for rejected utterances. Thresholds are not
        applied here; see acceptance_threshold.
        """
        if self.is_rejected(text, templates):
            logger.debug("Heuristic matcher rejected utterance")
            return []

        normalized = normalize_input(text)
        candidates = []
        for template in templates:
            raw_score = self.score(normalized, template)
            logger.debug("Heuristic score %.3f for template %s", raw_score, template.id)
            if raw_score <= 0:
                continue
            params = extract_parameters(
                text, template.natural_language_pattern, mentions, self.id_shape
            )
            candidates.append(
                MatchCandidate(
                    template=template,
                    confidence=min(raw_score, 1.0),
                    params=params,
                    raw_score=raw_score,
                )
            )
        return rank_candidates(candidates)

    async def match(
        self,
        text: str,
        templates: list[CommandTemplate],
        *,
        mentions: list[str] | None = None,
        context=None,
    ) -> MatchResult:
        return MatchResult(candidates=self.rank(text, templates, mentions), source=self.name)
