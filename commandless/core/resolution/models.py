# commandless/core/resolution/models.py
"""Utterance input and ResolutionDecision output types.

A decision is exactly one of Execute, Clarify or Converse; callers
dispatch on ``kind`` (or isinstance) and never receive an exception for
ordinary resolution outcomes.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

from commandless.core.templates.models import CommandTemplate


@dataclass
class Author:
    """Message author."""

    id: str
    name: str = ""


@dataclass
class Utterance:
    """An incoming chat message.

    Attributes:
        content: Raw message text.
        author: Who wrote it.
        channel_id: Channel the message was posted in.
        mentions: User ids the platform reports as mentioned (bot excluded).
        reply_to_message_id: Message this one replies to, if any.
        message_id: Platform id of this message, if known.
    """

    content: str
    author: Author
    channel_id: str
    mentions: list[str] = field(default_factory=list)
    reply_to_message_id: str | None = None
    message_id: str | None = None


@dataclass
class Execute:
    """Run a template with bound parameters.

    Attributes:
        template: The chosen template.
        rendered_output: Output template with every placeholder substituted.
        params: Final parameter map used for rendering.
        confidence: Confidence of the accepted candidate.
        matcher: Which matcher produced the candidate (``llm``/``heuristic``/``confirmation``).
    """

    kind: ClassVar[str] = "execute"

    template: CommandTemplate
    rendered_output: str
    params: dict[str, str]
    confidence: float = 1.0
    matcher: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "template_id": self.template.id,
            "template_name": self.template.name,
            "rendered_output": self.rendered_output,
            "params": dict(self.params),
            "confidence": round(self.confidence, 4),
            "matcher": self.matcher,
        }


@dataclass
class Clarify:
    """Ask a disambiguating question instead of acting."""

    kind: ClassVar[str] = "clarify"

    question: str
    template: CommandTemplate | None = None
    options: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "question": self.question,
            "template_id": self.template.id if self.template else None,
            "options": list(self.options),
        }


@dataclass
class Converse:
    """Reply conversationally without invoking any template."""

    kind: ClassVar[str] = "converse"

    reply: str
    intent: str = "generic"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "reply": self.reply, "intent": self.intent}


ResolutionDecision = Execute | Clarify | Converse
