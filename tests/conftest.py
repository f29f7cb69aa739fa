"""Shared test fixtures for the atelier test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from atelier.config.models.generation import GeneratorModelConfig
from atelier.context.models import InboundMessage, TurnContext
from atelier.conversation.models import Conversation, Message
from atelier.conversation.stores.inmemory import InMemoryConversationStore
from atelier.generators.base import GeneratorDeps
from atelier.memory.stores.inmemory import InMemoryMemoryStore
from atelier.profile.models import User
from atelier.profile.stores.inmemory import InMemoryUserStore
from atelier.prompts.repository import FilePromptRepository
from atelier.providers.llm import MockModelProvider, StructuredOutputInvoker
from atelier.providers.media import MockVisionFileStore
from atelier.styling.stores.inmemory import InMemoryStylingStore


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            if self.original_env[key] is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = self.original_env[key]


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"ATELIER_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from atelier.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# Doubles shared across domains


@pytest.fixture
def mock_provider() -> MockModelProvider:
    return MockModelProvider()


@pytest.fixture
def invoker(mock_provider: MockModelProvider) -> StructuredOutputInvoker:
    return StructuredOutputInvoker(mock_provider)


@pytest.fixture
def prompts() -> FilePromptRepository:
    return FilePromptRepository()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def conversation_store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def styling_store() -> InMemoryStylingStore:
    return InMemoryStylingStore()


@pytest.fixture
def memory_store() -> InMemoryMemoryStore:
    return InMemoryMemoryStore()


@pytest.fixture
def vision_files() -> MockVisionFileStore:
    return MockVisionFileStore()


@pytest.fixture
def model_config() -> GeneratorModelConfig:
    return GeneratorModelConfig(model="test-model", effort="low", history_limit=6)


@pytest.fixture
def generator_deps(
    invoker: StructuredOutputInvoker,
    prompts: FilePromptRepository,
    styling_store: InMemoryStylingStore,
    user_store: InMemoryUserStore,
    vision_files: MockVisionFileStore,
) -> GeneratorDeps:
    return GeneratorDeps(
        invoker=invoker,
        prompts=prompts,
        styling_store=styling_store,
        user_store=user_store,
        vision_files=vision_files,
    )


@pytest.fixture
def make_context() -> Callable[..., TurnContext]:
    """Factory for TurnContext instances.

    Usage:
        context = make_context(text="What goes with navy?", user=user)
    """

    def _make(
        text: str = "",
        user: User | None = None,
        conversation: Conversation | None = None,
        messages: tuple[Message, ...] = (),
        **inbound: Any,
    ) -> TurnContext:
        user = user or User(external_id="15550001111")
        conversation = conversation or Conversation(user_id=user.id)
        return TurnContext(
            user=user,
            conversation=conversation,
            inbound=InboundMessage(external_user_id=user.external_id, text=text, **inbound),
            messages=messages,
        )

    return _make
