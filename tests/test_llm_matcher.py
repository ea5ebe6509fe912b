# tests/test_llm_matcher.py
"""Tests for the generative matcher and its response parsing."""

import asyncio
import json

import pytest

from commandless.core.context.store import ConversationContext, ConversationTurn
from commandless.core.errors import MalformedModelResponse, MatcherUnavailable
from commandless.core.matching.llm import (
    DEGRADED_REPLY,
    LLMMatcher,
    extract_first_json_object,
    parse_model_response,
)
from commandless.core.matching.prompts import build_intent_prompt


class TestExtractFirstJsonObject:
    """Tests for pulling a JSON object out of model prose."""

    def test_plain_object(self):
        """Test a bare object is returned unchanged."""
        assert extract_first_json_object('{"commandId": 1}') == '{"commandId": 1}'

    def test_prose_and_fences(self):
        """Test surrounding prose and code fences are ignored."""
        raw = 'Sure!\n```json\n{"commandId": 1, "params": {"user": "1"}}\n```\nDone.'
        assert extract_first_json_object(raw) == '{"commandId": 1, "params": {"user": "1"}}'

    def test_braces_inside_strings(self):
        """Test braces inside string values do not end the object."""
        raw = 'x {"conversationalResponse": "use {braces} }"} y'
        assert json.loads(extract_first_json_object(raw)) == {
            "conversationalResponse": "use {braces} }"
        }

    def test_unbalanced_first_brace(self):
        """Test an unclosed brace is skipped in favour of a later object."""
        assert extract_first_json_object('{ oops {"a": 1}') == '{"a": 1}'

    def test_no_object(self):
        """Test None without any object."""
        assert extract_first_json_object("I cannot help with that") is None


class TestParseModelResponse:
    """Tests for validating model responses."""

    def test_flat_command(self):
        """Test the flat commandId/confidence/params form."""
        response = parse_model_response(
            '{"commandId": 2, "confidence": 85, "params": {"user": "999", "reason": "spam"}}'
        )
        match = response.command_match()
        assert match.command_id == 2
        assert match.confidence == 85
        assert match.params == {"user": "999", "reason": "spam"}

    def test_nested_best_match(self):
        """Test the nested isCommand/bestMatch form."""
        response = parse_model_response(
            '{"isCommand": true, "bestMatch": {"commandId": 3, "confidence": 70, '
            '"params": {"amount": 5}}}'
        )
        match = response.command_match()
        assert match.command_id == 3
        assert match.params == {"amount": "5"}

    def test_nested_not_a_command(self):
        """Test isCommand false with a reply is conversational."""
        response = parse_model_response(
            '{"isCommand": false, "bestMatch": {"commandId": 3}, '
            '"conversationalResponse": "Hi there!"}'
        )
        assert response.command_match() is None
        assert response.conversational_response == "Hi there!"

    def test_string_command_id(self):
        """Test numeric strings are accepted as ids."""
        assert parse_model_response('{"commandId": "2", "confidence": 90}').command_match().command_id == 2

    def test_params_coerced_and_blanks_dropped(self):
        """Test param values become strings and empty values are dropped."""
        response = parse_model_response(
            '{"commandId": 1, "confidence": 90, "params": {"amount": 10, "reason": "", "user": null}}'
        )
        assert response.params == {"amount": "10"}

    @pytest.mark.parametrize(
        "raw",
        [
            "no json here",
            "{not json}",
            '{"confidence": 90}',
            '{"commandId": 1, "confidence": 150}',
            '{"commandId": 1, "params": ["user"]}',
            '{"commandId": "ban"}',
        ],
    )
    def test_malformed(self, raw):
        """Test unusable shapes raise MalformedModelResponse."""
        with pytest.raises(MalformedModelResponse):
            parse_model_response(raw)


class TestLLMMatcher:
    """Tests for LLMMatcher.match."""

    @pytest.mark.asyncio
    async def test_known_template(self, templates, stub_generator):
        """Test a valid response becomes a single candidate."""
        generator = stub_generator(
            '{"commandId": 2, "confidence": 85, "params": {"user": "999", "reason": "spam"}}'
        )
        result = await LLMMatcher(generator).match("warn <@999> for spam", templates)

        assert result.source == "llm"
        assert not result.degraded
        assert result.best.template.id == 2
        assert result.best.confidence == pytest.approx(0.85)
        assert result.best.params == {"user": "999", "reason": "spam"}

    @pytest.mark.asyncio
    async def test_conversational(self, templates, stub_generator):
        """Test a conversational reply has no candidates."""
        generator = stub_generator('{"conversationalResponse": "Doing great, thanks!"}')
        result = await LLMMatcher(generator).match("how are you", templates)

        assert result.is_conversational
        assert result.conversational_response == "Doing great, thanks!"

    @pytest.mark.asyncio
    async def test_unknown_template_discarded(self, templates, stub_generator):
        """Test an id outside the active set is discarded as degraded."""
        generator = stub_generator('{"commandId": 99, "confidence": 95}')
        result = await LLMMatcher(generator).match("do the thing", templates)

        assert result.degraded
        assert result.candidates == []
        assert result.conversational_response is None

    @pytest.mark.asyncio
    async def test_malformed_is_degraded(self, templates, stub_generator):
        """Test malformed output yields a degraded conversational result."""
        result = await LLMMatcher(stub_generator("I think you mean ban?")).match(
            "ban them", templates
        )

        assert result.degraded
        assert result.conversational_response == DEGRADED_REPLY

    @pytest.mark.asyncio
    async def test_timeout_raises_unavailable(self, templates, stub_generator):
        """Test a slow model raises MatcherUnavailable."""
        matcher = LLMMatcher(stub_generator("{}", delay=1.0), timeout=0.01)
        with pytest.raises(MatcherUnavailable):
            await matcher.match("ban <@1>", templates)

    @pytest.mark.asyncio
    async def test_error_raises_unavailable(self, templates, stub_generator):
        """Test generator errors are wrapped in MatcherUnavailable."""
        matcher = LLMMatcher(stub_generator(error=ConnectionError("refused")))
        with pytest.raises(MatcherUnavailable, match="refused"):
            await matcher.match("ban <@1>", templates)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, templates, stub_generator):
        """Test task cancellation is not converted into MatcherUnavailable."""
        matcher = LLMMatcher(stub_generator("{}", delay=5.0), timeout=10)
        task = asyncio.create_task(matcher.match("ban <@1>", templates))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestPrompt:
    """Tests for the intent prompt."""

    def test_lists_templates_and_message(self, templates):
        """Test every template id, pattern and output appears with the utterance."""
        prompt = build_intent_prompt("ban <@1> for spam", templates)

        for template in templates:
            assert f"id: {template.id}" in prompt
            assert template.natural_language_pattern in prompt
            assert template.output_template in prompt
        assert "[User Message]\nban <@1> for spam" in prompt
        assert "commandId" in prompt
        assert "[Conversation Context]" not in prompt

    def test_includes_reply_context(self, templates):
        """Test the reply-linked turn and recent turns are included."""
        linked = ConversationTurn(
            message_id="m1",
            channel_id="c1",
            author_id="bot",
            content="Who should I ban?",
            timestamp=1.0,
            is_bot_authored=True,
        )
        recent = ConversationTurn(
            message_id="m0",
            channel_id="c1",
            author_id="42",
            content="this user keeps spamming",
            timestamp=0.5,
        )
        context = ConversationContext(linked_turn=linked, recent_turns=[recent])

        prompt = build_intent_prompt("<@7>", templates, context)

        assert "[Conversation Context]" in prompt
        assert "The message replies to -> bot: Who should I ban?" in prompt
        assert "user 42: this user keeps spamming" in prompt

    def test_aliases_listed(self, template_factory):
        """Test aliases are shown to the model."""
        template = template_factory(
            7, "lock", "lock {channel}", "/lock {channel}", aliases=["lockdown {channel}"]
        )
        assert "also phrased as: lockdown {channel}" in build_intent_prompt("lock it", [template])
