"""Placeholder handling and output rendering for command templates."""

import re

PLACEHOLDER_RE = re.compile(r"\{([A-Za-z0-9_]+)\}")
COMMAND_NAME_RE = re.compile(r"^/([A-Za-z0-9_-]+)")
# "key:{placeholder}" option tokens in slash-command style outputs
LABELLED_OPTION_RE = re.compile(r"\s*[A-Za-z0-9_-]+:\{([A-Za-z0-9_]+)\}")

DEFAULT_PARAMS: dict[str, str] = {
    "reason": "No reason provided",
    "message": "No message provided",
    "amount": "1",
    "duration": "5m",
    "user": "target user",
}


def placeholders(text: str) -> list[str]:
    """Return placeholder names in order of first appearance.

    Example:
        >>> placeholders("ban {user} for {reason} ({user})")
        ['user', 'reason']
    """
    seen: list[str] = []
    for name in PLACEHOLDER_RE.findall(text):
        if name not in seen:
            seen.append(name)
    return seen


def extract_command_name(output_template: str) -> str:
    """Extract the command name from a ``/name ...`` output template."""
    match = COMMAND_NAME_RE.match(output_template.strip())
    return match.group(1).lower() if match else ""


def strip_placeholders(pattern: str) -> str:
    """Remove placeholder tokens and collapse whitespace."""
    return " ".join(PLACEHOLDER_RE.sub(" ", pattern).split())


def undocumented_placeholders(pattern: str, output_template: str) -> list[str]:
    """List output placeholders that can never be resolved.

    A placeholder is resolvable when it appears in the pattern, has a
    documented default, or is a labelled ``key:{name}`` option (omitted
    from the output when unbound).
    """
    in_pattern = set(placeholders(pattern))
    labelled = set(LABELLED_OPTION_RE.findall(output_template))
    return [
        name
        for name in placeholders(output_template)
        if name not in in_pattern and name not in DEFAULT_PARAMS and name not in labelled
    ]


def render_output(
    output_template: str,
    params: dict[str, str],
    defaults: dict[str, str] | None = None,
) -> str:
    """Render an output template with resolved parameters.

    Each ``{placeholder}`` is replaced with its resolved value, falling back
    to the documented default. Labelled options with neither are dropped;
    any other unresolved placeholder renders as an empty string.

    Args:
        output_template: Template with ``{placeholder}`` tokens.
        params: Resolved parameter values.
        defaults: Documented defaults (DEFAULT_PARAMS when omitted).

    Returns:
        Rendered command string without placeholder tokens.

    Example:
        >>> render_output("/ban {user} {reason}", {"user": "123"})
        '/ban 123 No reason provided'
    """
    defaults = DEFAULT_PARAMS if defaults is None else defaults

    def resolve(name: str) -> str:
        value = params.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
        return defaults.get(name, "")

    def replace_labelled(match: re.Match) -> str:
        if resolve(match.group(1)):
            return match.group(0)
        return ""

    text = LABELLED_OPTION_RE.sub(replace_labelled, output_template)
    text = PLACEHOLDER_RE.sub(lambda m: resolve(m.group(1)), text)
    return " ".join(text.split())
