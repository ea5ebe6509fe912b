"""Text generation clients for the generative matcher."""

import logging
from typing import Protocol, runtime_checkable

from litellm import acompletion

from commandless.config import settings

logger = logging.getLogger(__name__)


@runtime_checkable
class TextGenerator(Protocol):
    """Anything that turns a prompt into raw model text."""

    async def generate(self, prompt: str) -> str:
        ...


class LiteLLMGenerator:
    """TextGenerator backed by litellm's async completion API.

    Args:
        model: litellm model string; defaults to settings.intent_model.
        api_key: Provider credential; defaults to settings.api_key.
        max_tokens: Response token cap.
    """

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        max_tokens: int = 400,
    ) -> None:
        self.model = model or settings.intent_model
        self.api_key = settings.api_key if api_key is None else api_key
        self.max_tokens = max_tokens

    async def generate(self, prompt: str) -> str:
        kwargs = {
            "model": self.model,
            "messages": [
                {
                    "role": "system",
                    "content": "You map chat messages to bot commands and reply only with JSON.",
                },
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": 0,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key

        response = await acompletion(**kwargs)
        content = response.choices[0].message.content or ""
        logger.debug("Model %s returned %d chars", self.model, len(content))
        return content


def default_generator() -> LiteLLMGenerator | None:
    """Generator from settings, or None when no model credential is configured."""
    if not settings.api_key:
        return None
    return LiteLLMGenerator()
