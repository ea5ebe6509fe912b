# commandless/core/matching/prompts.py
"""Prompt builder for the generative intent matcher.

The prompt enumerates the tenant's active templates, the utterance and a
short context block, and pins the model to a JSON-only response contract.
"""

from commandless.core.context.store import ConversationContext, ConversationTurn
from commandless.core.templates.models import CommandTemplate

RESPONSE_CONTRACT = """Respond with ONLY one JSON object, no other text.

If the message asks for one of the commands:
{"commandId": <id>, "confidence": <0-100>, "params": {"<placeholder>": "<value>"}}

If the message is conversation (greeting, question, chit-chat) and not a command:
{"conversationalResponse": "<short friendly reply>"}

Rules:
- commandId must be one of the listed ids.
- params keys are placeholder names from the chosen pattern, without braces.
- For user mentions like <@123> use the bare id "123".
- Omit params you cannot find in the message; do not invent values.
- Use confidence below 60 when unsure."""


def _format_template(template: CommandTemplate) -> str:
    line = (
        f"- id: {template.id} | name: {template.name} | "
        f"pattern: {template.natural_language_pattern} | "
        f"output: {template.output_template}"
    )
    if template.aliases:
        line += f" | also phrased as: {'; '.join(template.aliases)}"
    if template.description:
        line += f" | description: {template.description}"
    return line


def _format_turn(turn: ConversationTurn) -> str:
    speaker = "bot" if turn.is_bot_authored else f"user {turn.author_id}"
    return f"{speaker}: {turn.content}"


def build_context_block(context: ConversationContext | None) -> str:
    """Format the reply-linked turn and recent turns; empty when there is none."""
    if context is None or context.is_empty:
        return ""

    lines = []
    if context.linked_turn is not None:
        lines.append(f"The message replies to -> {_format_turn(context.linked_turn)}")
    if context.recent_turns:
        lines.append("Recent messages:")
        lines.extend(f"  {_format_turn(turn)}" for turn in context.recent_turns)
    return "\n".join(lines)


def build_intent_prompt(
    text: str,
    templates: list[CommandTemplate],
    context: ConversationContext | None = None,
) -> str:
    """Build the matching prompt for one utterance.

    Args:
        text: The user's message.
        templates: Active templates the model may choose from.
        context: Optional conversation context.

    Returns:
        Prompt text for TextGenerator.generate.

    Example:
        >>> prompt = build_intent_prompt("ban <@1> for spam", [ban_template])
        >>> "commandId" in prompt
        True
    """
    template_lines = "\n".join(_format_template(t) for t in templates)

    context_section = ""
    context_block = build_context_block(context)
    if context_block:
        context_section = f"""
[Conversation Context]
{context_block}
"""

    return f"""[Task]
Decide whether the user's message asks the bot to run one of the available commands,
and if so extract the parameters.

[Available Commands]
{template_lines}
{context_section}
[User Message]
{text}

[Response Format]
{RESPONSE_CONTRACT}"""
