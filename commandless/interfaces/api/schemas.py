# commandless/interfaces/api/schemas.py
"""Pydantic models for FastAPI request/response validation."""

from typing import Any

from pydantic import BaseModel, Field

from commandless.core.templates.models import CommandTemplate


class ResolveRequest(BaseModel):
    """Request body for POST /resolve.

    Attributes:
        tenant_id: Owner of the template registry to match against.
        content: Raw message text.
        confirm: Use the strict resolver with yes/no confirmation.
    """

    tenant_id: str = Field(..., description="Tenant whose templates are used")
    content: str = Field(..., description="Raw message text")
    author_id: str = Field(..., description="Message author id")
    author_name: str = Field("", description="Message author display name")
    channel_id: str = Field(..., description="Channel the message was posted in")
    mentions: list[str] = Field(
        default_factory=list, description="Mentioned user ids (bot excluded)"
    )
    message_id: str | None = Field(None, description="Platform id of this message")
    reply_to_message_id: str | None = Field(
        None, description="Id of the message this one replies to"
    )
    confirm: bool = Field(False, description="Ask before acting on uncertain matches")


class ResolveResponse(BaseModel):
    """Response body for POST /resolve."""

    request_id: str = Field(..., description="Correlation id for log lookup")
    decision: dict[str, Any] = Field(..., description="Execute, Clarify or Converse")


class TemplateCreate(BaseModel):
    """Request body for POST /templates."""

    tenant_id: str
    name: str = Field(..., min_length=1)
    natural_language_pattern: str = Field(..., min_length=1)
    output_template: str = Field(..., min_length=1)
    description: str = ""
    aliases: list[str] = Field(default_factory=list)


class TemplateResponse(BaseModel):
    """A stored template."""

    id: int
    tenant_id: str
    name: str
    natural_language_pattern: str
    output_template: str
    status: str
    usage_count: int
    created_at: str
    description: str = ""
    aliases: list[str] = Field(default_factory=list)

    @classmethod
    def from_template(cls, template: CommandTemplate) -> "TemplateResponse":
        return cls(
            id=template.id,
            tenant_id=template.tenant_id,
            name=template.name,
            natural_language_pattern=template.natural_language_pattern,
            output_template=template.output_template,
            status=template.status,
            usage_count=template.usage_count,
            created_at=template.created_at.isoformat(),
            description=template.description,
            aliases=list(template.aliases),
        )


class CommandOption(BaseModel):
    """A declared command option; ``type`` is a name or a platform type code."""

    name: str
    type: int | str = "string"
    required: bool = False
    description: str = ""


class DiscoveredCommand(BaseModel):
    """A structured command reported by a platform."""

    name: str = Field(..., min_length=1)
    description: str = ""
    options: list[CommandOption] = Field(default_factory=list)


class DiscoverRequest(BaseModel):
    """Request body for POST /templates/discover."""

    tenant_id: str
    commands: list[DiscoveredCommand]


class DiscoveredTemplateResponse(TemplateResponse):
    """A template created by discovery, with the generator's quality estimate."""

    generation_confidence: float


class TurnCreate(BaseModel):
    """Request body for POST /context/turns (usually the bot's own replies)."""

    channel_id: str
    message_id: str
    author_id: str
    content: str
    is_bot_authored: bool = True
