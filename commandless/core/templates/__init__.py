"""Command template module.

This module provides:
- CommandTemplate: Data model for a tenant's registered template
- TemplateRepository / TemplateStore: SQLite store and the async store protocol
- PatternGenerator: Generates patterns and output templates from command schemas
- render_output: Renders an output template with resolved parameters
"""

from commandless.core.templates.generator import (
    CommandParameter,
    CommandSchema,
    GeneratedPattern,
    PatternGenerator,
    generate_patterns,
)
from commandless.core.templates.models import (
    STATUS_ACTIVE,
    STATUS_INACTIVE,
    CommandTemplate,
)
from commandless.core.templates.rendering import (
    DEFAULT_PARAMS,
    extract_command_name,
    placeholders,
    render_output,
)
from commandless.core.templates.repository import (
    TemplateRepository,
    TemplateStore,
    get_repository,
)

__all__ = [
    "CommandTemplate",
    "STATUS_ACTIVE",
    "STATUS_INACTIVE",
    "CommandParameter",
    "CommandSchema",
    "GeneratedPattern",
    "PatternGenerator",
    "generate_patterns",
    "DEFAULT_PARAMS",
    "extract_command_name",
    "placeholders",
    "render_output",
    "TemplateRepository",
    "TemplateStore",
    "get_repository",
]
