# commandless/core/templates/generator.py
"""Natural-language pattern generation from structured command schemas.

Turns a discovered slash-command schema (name, description, typed
parameters) into a primary natural-language pattern, up to three
alternative phrasings and a ``/name key:{slot}`` output template.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from commandless.core.templates.models import CommandTemplate

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3

# Platform option type codes (Discord numbering) accepted alongside names
OPTION_TYPE_CODES = {
    1: "subcommand",
    2: "subcommand_group",
    3: "string",
    4: "integer",
    5: "boolean",
    6: "user",
    7: "channel",
    8: "role",
    9: "mentionable",
    10: "number",
    11: "attachment",
}
SUBCOMMAND_TYPES = frozenset({"subcommand", "subcommand_group"})

# Declared parameter name -> canonical slot
PARAMETER_SLOTS = {
    "user": "user",
    "member": "user",
    "target": "user",
    "person": "user",
    "player": "user",
    "reason": "reason",
    "cause": "reason",
    "why": "reason",
    "message": "message",
    "content": "message",
    "text": "message",
    "msg": "message",
    "duration": "duration",
    "time": "duration",
    "timeout": "duration",
    "length": "duration",
    "amount": "amount",
    "number": "amount",
    "count": "amount",
    "quantity": "amount",
    "role": "role",
    "rank": "role",
    "channel": "channel",
    "room": "channel",
    "name": "name",
    "title": "name",
}

IMPORTANT_OPTIONAL_SLOTS = ("reason", "message", "duration")
CANONICAL_SLOTS = frozenset({"user", "reason", "channel", "role", "message", "duration"})
MODERATION_COMMANDS = frozenset({"ban", "kick", "mute", "warn", "timeout", "role"})
REASON_PREPOSITIONS = ("for", "because", "with")

COMMAND_SYNONYMS: dict[str, list[str]] = {
    "ban": ["kick out", "remove", "banish"],
    "kick": ["remove", "boot", "eject"],
    "mute": ["silence", "quiet"],
    "unmute": ["unsilence", "allow speaking"],
    "warn": ["caution", "alert"],
    "timeout": ["time out", "temporarily mute"],
    "role": ["give role", "assign role"],
    "nick": ["nickname", "rename"],
    "avatar": ["profile picture", "pfp"],
    "channel": ["create channel", "make channel"],
    "delete": ["remove", "destroy"],
    "clear": ["purge", "clean"],
    "purge": ["clear", "clean up"],
    "say": ["announce", "tell everyone"],
    "lock": ["lockdown", "restrict"],
    "unlock": ["open", "unrestrict"],
}


@dataclass
class CommandParameter:
    """A declared command option.

    Attributes:
        name: Declared option name.
        type: Option type name (``string``, ``user``, ``integer`` ...).
        required: Whether the platform requires the option.
        description: Optional option description.
    """

    name: str
    type: str = "string"
    required: bool = False
    description: str = ""

    @property
    def is_subcommand(self) -> bool:
        return self.type in SUBCOMMAND_TYPES

    @property
    def slot(self) -> str:
        """Canonical placeholder name for this parameter."""
        return parameter_slot(self)


@dataclass
class CommandSchema:
    """A structured command as discovered from a platform."""

    name: str
    description: str = ""
    parameters: list[CommandParameter] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommandSchema":
        """Create from a platform payload.

        Accepts either ``parameters`` or Discord-style ``options`` and
        numeric or named option types.
        """
        raw_params = data.get("parameters")
        if raw_params is None:
            raw_params = data.get("options") or []
        parameters = [
            CommandParameter(
                name=str(raw["name"]),
                type=normalize_option_type(raw.get("type", "string")),
                required=bool(raw.get("required", False)),
                description=raw.get("description") or "",
            )
            for raw in raw_params
        ]
        return cls(
            name=str(data["name"]),
            description=data.get("description") or "",
            parameters=parameters,
        )


@dataclass
class GeneratedPattern:
    """Generated phrasing for one command.

    Attributes:
        primary: Primary natural-language pattern.
        alternatives: Up to three alternative phrasings.
        output_template: ``/name key:{slot}`` output template.
        confidence: Quality estimate in [0.1, 1.0].
    """

    primary: str
    alternatives: list[str]
    output_template: str
    confidence: float


def normalize_option_type(value: int | str) -> str:
    """Map a numeric or named option type to its lowercase name."""
    if isinstance(value, int):
        return OPTION_TYPE_CODES.get(value, "string")
    text = str(value).strip().lower().replace("-", "_")
    if text.isdigit():
        return OPTION_TYPE_CODES.get(int(text), "string")
    return text or "string"


def parameter_slot(param: CommandParameter) -> str:
    """Resolve the canonical slot name of a parameter.

    Exact-name matches win; otherwise the option type and name fragments
    decide, falling back to the declared name.
    """
    lower = param.name.lower()
    if lower in PARAMETER_SLOTS:
        return PARAMETER_SLOTS[lower]

    if param.type == "user":
        return "user"
    if param.type == "channel":
        return "channel"
    if param.type == "role":
        return "role"
    if param.type == "string":
        if any(word in lower for word in ("reason", "why", "cause")):
            return "reason"
        if any(word in lower for word in ("message", "text", "content")):
            return "message"
        if any(word in lower for word in ("duration", "time", "length")):
            return "duration"
    if param.type in ("integer", "number"):
        if any(word in lower for word in ("amount", "count", "number", "quantity")):
            return "amount"
        if any(word in lower for word in ("duration", "time", "length")):
            return "duration"
    return lower


class PatternGenerator:
    """Generates natural-language patterns for structured commands.

    The generator is stateless; every method is a pure function of the
    schema it receives.

    Example:
        >>> schema = CommandSchema(
        ...     name="ban",
        ...     description="Ban a member from the server",
        ...     parameters=[
        ...         CommandParameter("user", "user", required=True),
        ...         CommandParameter("reason", "string"),
        ...     ],
        ... )
        >>> generated = PatternGenerator().generate_patterns(schema)
        >>> generated.primary
        'ban {user} {reason}'
        >>> generated.output_template
        '/ban user:{user} reason:{reason}'
    """

    def generate_patterns(self, schema: CommandSchema) -> GeneratedPattern:
        """Generate the pattern set for a command schema."""
        slot_tokens = self._pattern_slots(schema)
        primary = " ".join([schema.name.lower(), *slot_tokens])
        alternatives = self._alternatives(schema, slot_tokens)
        output_template = self._output_template(schema)
        confidence = self._confidence(schema)

        logger.info("Generated patterns for /%s: %s", schema.name, primary)
        return GeneratedPattern(
            primary=primary,
            alternatives=alternatives,
            output_template=output_template,
            confidence=confidence,
        )

    def build_template(
        self, schema: CommandSchema, tenant_id: str, template_id: int = 0
    ) -> CommandTemplate:
        """Create an (unsaved) CommandTemplate from a discovered schema."""
        generated = self.generate_patterns(schema)
        return CommandTemplate(
            id=template_id,
            tenant_id=tenant_id,
            name=schema.name.lower(),
            natural_language_pattern=generated.primary,
            output_template=generated.output_template,
            description=schema.description,
            aliases=generated.alternatives,
        )

    def _pattern_slots(self, schema: CommandSchema) -> list[str]:
        params = [p for p in schema.parameters if not p.is_subcommand]
        tokens = [f"{{{p.slot}}}" for p in params if p.required]
        tokens += [
            f"{{{p.slot}}}"
            for p in params
            if not p.required and p.slot in IMPORTANT_OPTIONAL_SLOTS
        ]
        ordered: list[str] = []
        for token in tokens:
            if token not in ordered:
                ordered.append(token)
        return ordered

    def _alternatives(self, schema: CommandSchema, slot_tokens: list[str]) -> list[str]:
        alternatives = [
            " ".join([synonym, *slot_tokens])
            for synonym in COMMAND_SYNONYMS.get(schema.name.lower(), [])
        ]

        required = [
            f"{{{p.slot}}}"
            for p in schema.parameters
            if p.required and not p.is_subcommand
        ]
        has_reason = any(
            p.slot == "reason" and not p.required for p in schema.parameters
        )
        if required and has_reason:
            for preposition in REASON_PREPOSITIONS:
                alternatives.append(
                    " ".join([schema.name.lower(), *required, preposition, "{reason}"])
                )

        return alternatives[:MAX_ALTERNATIVES]

    def _output_template(self, schema: CommandSchema) -> str:
        parts = [f"/{schema.name.lower()}"]
        for param in schema.parameters:
            if param.is_subcommand:
                continue
            parts.append(f"{param.name}:{{{param.slot}}}")
        return " ".join(parts)

    def _confidence(self, schema: CommandSchema) -> float:
        confidence = 0.7

        if schema.description and len(schema.description) > 10:
            confidence += 0.1

        names = {p.name.lower() for p in schema.parameters}
        if names & CANONICAL_SLOTS:
            confidence += 0.1

        if len(schema.parameters) > 5:
            confidence -= 0.1

        if schema.name.lower() in MODERATION_COMMANDS:
            confidence += 0.1

        return round(min(max(confidence, 0.1), 1.0), 2)


def generate_patterns(schema: CommandSchema) -> GeneratedPattern:
    """Module-level shortcut for PatternGenerator().generate_patterns."""
    return PatternGenerator().generate_patterns(schema)
