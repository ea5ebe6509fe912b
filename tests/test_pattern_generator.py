# tests/test_pattern_generator.py
"""Tests for pattern generation from discovered command schemas."""

import pytest

from commandless.core.templates.generator import (
    CommandParameter,
    CommandSchema,
    PatternGenerator,
    generate_patterns,
    normalize_option_type,
)
from commandless.core.templates.rendering import placeholders, render_output


@pytest.fixture
def ban_schema() -> CommandSchema:
    return CommandSchema(
        name="ban",
        description="Ban a member from the server",
        parameters=[
            CommandParameter("user", "user", required=True),
            CommandParameter("reason", "string"),
        ],
    )


class TestPrimaryPattern:
    """Tests for the primary natural-language pattern."""

    def test_required_then_important_optional(self, ban_schema):
        """Test primary pattern lists required slots then reason/message/duration."""
        generated = generate_patterns(ban_schema)
        assert generated.primary == "ban {user} {reason}"

    def test_unimportant_optional_parameters_are_left_out(self):
        """Test optional parameters outside the allowlist do not appear."""
        schema = CommandSchema(
            name="Purge",
            parameters=[
                CommandParameter("amount", "integer", required=True),
                CommandParameter("channel", "channel"),
            ],
        )
        generated = generate_patterns(schema)
        assert generated.primary == "purge {amount}"

    def test_parameter_names_normalised_to_canonical_slots(self):
        """Test member/count/time map to user/amount/duration."""
        schema = CommandSchema(
            name="timeout",
            parameters=[
                CommandParameter("member", "user", required=True),
                CommandParameter("time", "string", required=True),
            ],
        )
        generated = generate_patterns(schema)
        assert generated.primary == "timeout {user} {duration}"
        assert generated.output_template == "/timeout member:{user} time:{duration}"


class TestAlternatives:
    """Tests for alternative phrasings."""

    def test_synonyms_keep_placeholder_order(self, ban_schema):
        """Test synonyms replace the name and keep the same slots."""
        generated = generate_patterns(ban_schema)
        assert generated.alternatives == [
            "kick out {user} {reason}",
            "remove {user} {reason}",
            "banish {user} {reason}",
        ]

    def test_preposition_alternatives_without_synonyms(self):
        """Test commands with no synonyms get for/because/with reason phrasings."""
        schema = CommandSchema(
            name="report",
            parameters=[
                CommandParameter("user", "user", required=True),
                CommandParameter("reason", "string"),
            ],
        )
        generated = generate_patterns(schema)
        assert generated.alternatives == [
            "report {user} for {reason}",
            "report {user} because {reason}",
            "report {user} with {reason}",
        ]

    def test_at_most_three_alternatives(self):
        """Test synonyms plus prepositions are capped at three."""
        schema = CommandSchema(
            name="kick",
            parameters=[
                CommandParameter("user", "user", required=True),
                CommandParameter("reason", "string"),
            ],
        )
        assert len(generate_patterns(schema).alternatives) == 3

    def test_no_parameters_no_alternatives_for_unknown_name(self):
        """Test a bare unknown command has no alternatives."""
        generated = generate_patterns(CommandSchema(name="ping"))
        assert generated.primary == "ping"
        assert generated.alternatives == []
        assert generated.output_template == "/ping"


class TestOutputTemplate:
    """Tests for the slash-command output template."""

    def test_key_value_for_each_parameter(self, ban_schema):
        """Test output is /name followed by key:{slot} in declared order."""
        assert generate_patterns(ban_schema).output_template == "/ban user:{user} reason:{reason}"

    def test_subcommands_are_skipped(self):
        """Test subcommand options never appear in the output."""
        schema = CommandSchema.from_dict(
            {
                "name": "role",
                "options": [
                    {"name": "add", "type": 1},
                    {"name": "user", "type": 6, "required": True},
                    {"name": "role", "type": 8, "required": True},
                ],
            }
        )
        generated = generate_patterns(schema)
        assert generated.output_template == "/role user:{user} role:{role}"
        assert "add" not in generated.primary

    def test_rendered_output_names_every_parameter_once(self, ban_schema):
        """Test rendering with all parameters bound names each parameter exactly once."""
        generated = generate_patterns(ban_schema)
        params = {name: "x" for name in placeholders(generated.output_template)}
        rendered = render_output(generated.output_template, params)

        assert rendered.startswith("/ban")
        for parameter in ban_schema.parameters:
            assert rendered.count(f"{parameter.name}:") == 1
        assert "{" not in rendered


class TestConfidence:
    """Tests for the generation confidence estimate."""

    def test_descriptive_moderation_command_scores_max(self, ban_schema):
        """Test description, canonical slots and moderation name all add up."""
        assert generate_patterns(ban_schema).confidence == 1.0

    def test_baseline(self):
        """Test a bare command keeps the 0.7 baseline."""
        assert generate_patterns(CommandSchema(name="ping")).confidence == 0.7

    def test_many_parameters_penalised(self):
        """Test more than five parameters lowers confidence."""
        schema = CommandSchema(
            name="configure",
            parameters=[CommandParameter(f"option{i}") for i in range(6)],
        )
        assert generate_patterns(schema).confidence == 0.6


class TestSchemaParsing:
    """Tests for platform payload parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [(6, "user"), ("4", "integer"), ("STRING", "string"), (99, "string"), ("", "string")],
    )
    def test_normalize_option_type(self, value, expected):
        """Test numeric codes and names map to lowercase type names."""
        assert normalize_option_type(value) == expected

    def test_from_dict_accepts_numeric_types(self):
        """Test Discord-style option payloads parse into parameters."""
        schema = CommandSchema.from_dict(
            {"name": "purge", "options": [{"name": "count", "type": 4, "required": True}]}
        )
        generated = generate_patterns(schema)
        assert generated.primary == "purge {amount}"
        assert generated.output_template == "/purge count:{amount}"


class TestBuildTemplate:
    """Tests for turning a schema into a CommandTemplate."""

    def test_build_template(self, ban_schema):
        """Test the template carries the generated pattern, output and aliases."""
        template = PatternGenerator().build_template(ban_schema, tenant_id="guild-9")

        assert template.tenant_id == "guild-9"
        assert template.name == "ban"
        assert template.natural_language_pattern == "ban {user} {reason}"
        assert template.output_template == "/ban user:{user} reason:{reason}"
        assert template.aliases[0] == "kick out {user} {reason}"
        assert template.is_active
        assert template.description == "Ban a member from the server"
