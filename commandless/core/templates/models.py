# commandless/core/templates/models.py
"""Command template data model.

This module defines the CommandTemplate dataclass which maps a
natural-language pattern to a parameterized command output for one tenant.
"""

from dataclasses import dataclass, field
from datetime import datetime

from commandless.core.templates.rendering import extract_command_name, placeholders

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"


@dataclass
class CommandTemplate:
    """Represents a registered command template.

    Templates are created by discovery or manual authoring and are
    deactivated rather than deleted.

    Attributes:
        id: Unique identifier assigned by the store.
        tenant_id: Owner of the template registry.
        name: Human-readable template name.
        natural_language_pattern: Pattern with ``{placeholder}`` tokens.
        output_template: Rendered command output with the same tokens.
        status: ``active`` or ``inactive``.
        usage_count: Number of successful executions.
        created_at: Creation timestamp.
        description: Optional free-text description of the command.
        aliases: Optional alternative phrasings (facets) for the command.

    Example:
        >>> tpl = CommandTemplate(
        ...     id=1,
        ...     tenant_id="guild-1",
        ...     name="ban",
        ...     natural_language_pattern="ban {user} for {reason}",
        ...     output_template="/ban {user} {reason}",
        ... )
        >>> tpl.command_name
        'ban'
    """

    id: int
    tenant_id: str
    name: str
    natural_language_pattern: str
    output_template: str
    status: str = STATUS_ACTIVE
    usage_count: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    description: str = ""
    aliases: list[str] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    @property
    def command_name(self) -> str:
        """Command name derived from the output template, else the template name."""
        return extract_command_name(self.output_template) or self.name.lower()

    @property
    def pattern_placeholders(self) -> list[str]:
        return placeholders(self.natural_language_pattern)

    @property
    def output_placeholders(self) -> list[str]:
        return placeholders(self.output_template)
