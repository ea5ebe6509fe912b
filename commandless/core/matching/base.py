"""Matcher interface and match result types."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from commandless.core.templates.models import CommandTemplate

if TYPE_CHECKING:
    from commandless.core.context.store import ConversationContext


@dataclass
class MatchCandidate:
    """A scored, parameter-bound proposal matching an utterance to a template.

    Attributes:
        template: The matched template.
        confidence: Match confidence in [0, 1].
        params: Parameters the matcher extracted (placeholder -> value).
        raw_score: Uncapped score used to break confidence ties.
    """

    template: CommandTemplate
    confidence: float
    params: dict[str, str] = field(default_factory=dict)
    raw_score: float = 0.0

    def __post_init__(self) -> None:
        self.confidence = min(max(float(self.confidence), 0.0), 1.0)


@dataclass
class MatchResult:
    """Outcome of one matcher run.

    Exactly one of ``candidates`` (ranked, best first) or
    ``conversational_response`` is normally populated. ``degraded`` marks a
    result produced after a recoverable failure (malformed model output,
    unknown template id) that the policy should not trust.
    """

    candidates: list[MatchCandidate] = field(default_factory=list)
    conversational_response: str | None = None
    degraded: bool = False
    source: str = ""

    @property
    def best(self) -> MatchCandidate | None:
        return self.candidates[0] if self.candidates else None

    @property
    def is_conversational(self) -> bool:
        return self.conversational_response is not None and not self.candidates


@runtime_checkable
class Matcher(Protocol):
    """Common interface of the generative and heuristic matchers."""

    name: str

    async def match(
        self,
        text: str,
        templates: list[CommandTemplate],
        *,
        mentions: list[str] | None = None,
        context: "ConversationContext | None" = None,
    ) -> MatchResult:
        """Match an utterance against the active templates."""
        ...


def candidate_sort_key(candidate: MatchCandidate) -> tuple[float, float, int, int]:
    """Ranking key: confidence, raw score, usage count (all desc), then template id."""
    return (
        -candidate.confidence,
        -candidate.raw_score,
        -candidate.template.usage_count,
        candidate.template.id,
    )


def rank_candidates(candidates: list[MatchCandidate]) -> list[MatchCandidate]:
    """Return candidates ordered best first; the order is fully deterministic."""
    return sorted(candidates, key=candidate_sort_key)
