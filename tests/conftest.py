# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- Temporary database paths and singleton reset
- A controllable clock and a fresh ConversationContextStore
- Sample command templates
- A stub text generator standing in for the model
"""

import asyncio
import os
import tempfile
from collections.abc import Generator

import pytest

from commandless.core.context.store import ConversationContextStore
from commandless.core.templates.models import CommandTemplate


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubGenerator:
    """TextGenerator returning canned model output.

    Args:
        response: Raw text returned by generate.
        error: Exception raised by generate instead of returning.
        delay: Seconds to sleep before answering.
    """

    def __init__(
        self, response: str = "", error: Exception | None = None, delay: float = 0.0
    ) -> None:
        self.response = response
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


def make_template(
    id: int,
    name: str,
    pattern: str,
    output: str,
    usage_count: int = 0,
    **kwargs,
) -> CommandTemplate:
    return CommandTemplate(
        id=id,
        tenant_id="guild-1",
        name=name,
        natural_language_pattern=pattern,
        output_template=output,
        usage_count=usage_count,
        **kwargs,
    )


@pytest.fixture
def temp_db() -> Generator[str, None, None]:
    """Create a temporary database file path.

    Yields:
        Path to temporary SQLite database file.
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    yield db_path

    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(db_path + suffix):
            os.unlink(db_path + suffix)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context_store(clock: FakeClock) -> Generator[ConversationContextStore, None, None]:
    """Fresh context store driven by the fake clock."""
    store = ConversationContextStore(capacity=10, ttl_seconds=7200, clock=clock)
    yield store
    store.clear()


@pytest.fixture
def ban_template() -> CommandTemplate:
    return make_template(1, "ban", "ban {user} for {reason}", "/ban {user} {reason}")


@pytest.fixture
def warn_template() -> CommandTemplate:
    return make_template(2, "warn", "warn {user} for {reason}", "/warn {user} {reason}")


@pytest.fixture
def purge_template() -> CommandTemplate:
    return make_template(3, "purge", "purge {amount}", "/purge {amount}")


@pytest.fixture
def say_template() -> CommandTemplate:
    return make_template(4, "say", "say {message}", "/say {message}")


@pytest.fixture
def mute_template() -> CommandTemplate:
    return make_template(
        5, "mute", "mute {user} for {duration}", "/mute {user} {duration} {reason}"
    )


@pytest.fixture
def templates(
    ban_template, warn_template, purge_template, say_template, mute_template
) -> list[CommandTemplate]:
    return [ban_template, warn_template, purge_template, say_template, mute_template]


@pytest.fixture
def reset_singletons() -> Generator[None, None, None]:
    """Reset the repository and API engine singletons before and after a test."""
    from commandless.core.templates.repository import reset_repository
    from commandless.interfaces.api.main import reset_engine

    reset_repository()
    reset_engine()

    yield

    reset_repository()
    reset_engine()


@pytest.fixture
def template_factory():
    """Build ad-hoc templates: template_factory(id, name, pattern, output, ...)."""
    return make_template


@pytest.fixture
def stub_generator():
    """Build a StubGenerator: stub_generator(response=..., error=..., delay=...)."""
    return StubGenerator
