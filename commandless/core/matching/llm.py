# commandless/core/matching/llm.py
"""Generative intent matcher.

Delegates matching and parameter extraction to a language model through a
constrained prompt/response contract. Model output is parsed leniently:
the first balanced JSON object is pulled out of surrounding prose and
validated with pydantic before use.
"""

import asyncio
import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from commandless.config import settings
from commandless.core.errors import MalformedModelResponse, MatcherUnavailable
from commandless.core.matching.base import MatchCandidate, MatchResult
from commandless.core.matching.generation import TextGenerator
from commandless.core.matching.prompts import build_intent_prompt
from commandless.core.templates.models import CommandTemplate

logger = logging.getLogger(__name__)

DEGRADED_REPLY = "I'm not sure I understood that. Could you rephrase it?"


def _stringify_params(value: Any) -> dict[str, str]:
    if not value:
        return {}
    if not isinstance(value, dict):
        raise ValueError("params must be an object")
    return {
        str(key): str(item).strip()
        for key, item in value.items()
        if item is not None and str(item).strip()
    }


class ModelCommandMatch(BaseModel):
    """Nested ``bestMatch`` shape some models return."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    command_id: int = Field(alias="commandId")
    confidence: float = Field(default=0.0, ge=0, le=100)
    params: dict[str, str] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _coerce_params(cls, value: Any) -> dict[str, str]:
        return _stringify_params(value)


class ModelIntentResponse(BaseModel):
    """Validated model response.

    Either a flat command match (``commandId``/``confidence``/``params``),
    the nested ``{"isCommand": true, "bestMatch": {...}}`` form, or a
    ``conversationalResponse``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    command_id: int | None = Field(default=None, alias="commandId")
    confidence: float | None = Field(default=None, ge=0, le=100)
    params: dict[str, str] = Field(default_factory=dict)
    conversational_response: str | None = Field(default=None, alias="conversationalResponse")
    is_command: bool | None = Field(default=None, alias="isCommand")
    best_match: ModelCommandMatch | None = Field(default=None, alias="bestMatch")

    @field_validator("params", mode="before")
    @classmethod
    def _coerce_params(cls, value: Any) -> dict[str, str]:
        return _stringify_params(value)

    def command_match(self) -> ModelCommandMatch | None:
        """The command proposal in either shape, or None."""
        if self.command_id is not None:
            return ModelCommandMatch(
                command_id=self.command_id,
                confidence=self.confidence or 0.0,
                params=self.params,
            )
        if self.best_match is not None and self.is_command is not False:
            return self.best_match
        return None


def extract_first_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` span in text.

    Braces inside JSON strings are ignored, so prose and code fences
    around the payload do not matter.

    Example:
        >>> extract_first_json_object('Sure! {"a": "}"} done')
        '{"a": "}"}'
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def parse_model_response(raw: str) -> ModelIntentResponse:
    """Parse raw model text into a validated response.

    Raises:
        MalformedModelResponse: If no JSON object is found, it does not
            validate, or it is neither a command match nor a reply.
    """
    payload = extract_first_json_object(raw or "")
    if payload is None:
        raise MalformedModelResponse("No JSON object in model response", raw=raw)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedModelResponse(f"Invalid JSON: {e}", raw=raw) from e

    if not isinstance(data, dict):
        raise MalformedModelResponse("Model response is not an object", raw=raw)

    try:
        response = ModelIntentResponse.model_validate(data)
    except ValidationError as e:
        raise MalformedModelResponse(f"Unexpected response shape: {e}", raw=raw) from e

    if response.command_match() is None and not response.conversational_response:
        raise MalformedModelResponse("Response has neither a command nor a reply", raw=raw)
    return response


class LLMMatcher:
    """Matcher that asks a language model to pick a template.

    Args:
        generator: Text generator used for the model call.
        timeout: Seconds allowed for the call; defaults to settings.model_timeout_seconds.

    Raises (from match):
        MatcherUnavailable: The model call failed or timed out.
    """

    name = "llm"

    def __init__(self, generator: TextGenerator, timeout: float | None = None) -> None:
        self.generator = generator
        self.timeout = settings.model_timeout_seconds if timeout is None else timeout

    async def _generate(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(self.generator.generate(prompt), timeout=self.timeout)
        except (TimeoutError, asyncio.TimeoutError) as e:
            raise MatcherUnavailable(f"Model call timed out after {self.timeout}s") from e
        except MatcherUnavailable:
            raise
        except Exception as e:
            raise MatcherUnavailable(f"Model call failed: {e}") from e

    async def match(
        self,
        text: str,
        templates: list[CommandTemplate],
        *,
        mentions: list[str] | None = None,
        context=None,
    ) -> MatchResult:
        prompt = build_intent_prompt(text, templates, context)
        raw = await self._generate(prompt)

        try:
            response = parse_model_response(raw)
        except MalformedModelResponse as e:
            logger.warning("Malformed model response: %s", e)
            return MatchResult(
                conversational_response=DEGRADED_REPLY, degraded=True, source=self.name
            )

        proposal = response.command_match()
        if proposal is not None:
            by_id = {t.id: t for t in templates}
            template = by_id.get(proposal.command_id)
            if template is None:
                logger.warning("Model chose unknown template id %s; discarded", proposal.command_id)
                return MatchResult(degraded=True, source=self.name)

            confidence = proposal.confidence / 100
            candidate = MatchCandidate(
                template=template,
                confidence=confidence,
                params=dict(proposal.params),
                raw_score=confidence,
            )
            return MatchResult(candidates=[candidate], source=self.name)

        return MatchResult(
            conversational_response=response.conversational_response, source=self.name
        )
