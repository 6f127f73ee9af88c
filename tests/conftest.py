"""Shared fixtures for the test suite."""

import pytest

from i18n_agent.config import AgentConfig
from i18n_agent.models.i18n import Language
from i18n_agent.models.llm import ModelReply
from i18n_agent.services.agent import AgentExecutor
from i18n_agent.services.context_window import ContextWindow
from i18n_agent.services.rate_limiter import RateLimiter
from i18n_agent.services.translation_store import InMemoryTranslationStore
from i18n_agent.tools.registry import ToolsRegistry
from tests.fakes import ScriptedChatModel, SleepRecorder, StubTokenizer


@pytest.fixture
def languages() -> list[Language]:
    return [
        Language(code="en", name="English", is_default=True),
        Language(code="zh-CN", name="简体中文"),
        Language(code="ja", name="日本語"),
        Language(code="fr", name="Français"),
        Language(code="de", name="Deutsch"),
        Language(code="xx", name="Retired", is_active=False),
    ]


@pytest.fixture
def store(languages) -> InMemoryTranslationStore:
    return InMemoryTranslationStore(languages)


@pytest.fixture
def registry(store) -> ToolsRegistry:
    return ToolsRegistry(store)


@pytest.fixture
def agent_config() -> AgentConfig:
    return AgentConfig(
        max_iterations=5,
        max_history_messages=4,
        tool_call_delay=0.25,
        calls_per_minute=60_000,
        max_retries=3,
        retry_base_delay=0.5,
    )


@pytest.fixture
def rate_limiter(agent_config) -> RateLimiter:
    return RateLimiter(agent_config.calls_per_minute)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_executor(registry, rate_limiter, agent_config, sleep_recorder):
    """Build an executor around a scripted model."""

    def _make(replies: list[ModelReply | Exception], config: AgentConfig | None = None):
        model = ScriptedChatModel(replies)
        config = config or agent_config
        executor = AgentExecutor(
            model=model,
            registry=registry,
            rate_limiter=rate_limiter,
            config=config,
            context_window=ContextWindow(
                max_history_messages=config.max_history_messages,
                max_message_tokens=config.max_message_tokens,
                tokenizer=StubTokenizer(),
            ),
            sleep=sleep_recorder,
        )
        return executor, model

    return _make
