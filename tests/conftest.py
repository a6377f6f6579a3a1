"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Callable
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from guider.api.app import app
from guider.config import ContextSettings, LLMSettings
from guider.context.sources import ConversationRecord, ConversationStore, HistoryMessage
from guider.llm.client import CompletionClient
from guider.llm.models import CompletionResult, TokenUsage
from guider.llm.tiers import ModelTier, build_tiers

PRIMARY_MODEL = "x-ai/grok-4-fast:free"
FALLBACK_1_MODEL = "z-ai/glm-4.5-air:free"
PERSONA = {"archetype": "The Analyst", "strengths": ["Analytical thinking"]}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def llm_settings() -> LLMSettings:
    """Upstream settings with a test API key and the default free chain."""
    return LLMSettings(api_key="test-key", base_url="http://openrouter.test/api/v1")


@pytest.fixture
def context_settings() -> ContextSettings:
    """Context settings with a small history bound."""
    return ContextSettings(max_history_turns=4, history_fetch_limit=10)


@pytest.fixture
def tiers(llm_settings: LLMSettings) -> tuple[ModelTier, ...]:
    """The four default tiers."""
    return build_tiers(llm_settings)


@pytest.fixture
def conversation() -> ConversationRecord:
    """A career-guidance conversation carrying its persona."""
    return ConversationRecord(
        id="conv-1",
        user_id="user-1",
        context_type="career_guidance",
        context_data={"profilePersona": PERSONA},
    )


@pytest.fixture
def store(conversation: ConversationRecord) -> AsyncMock:
    """Conversation store returning the fixture conversation and two turns."""
    mock_store = AsyncMock(spec=ConversationStore)
    mock_store.get_conversation.return_value = conversation
    mock_store.get_history.return_value = [
        HistoryMessage(sender_type="user", content="Halo Guider"),
        HistoryMessage(sender_type="assistant", content="Halo! Ada yang bisa saya bantu?"),
    ]
    return mock_store


@pytest.fixture
def completion_client() -> AsyncMock:
    """Completion client mock; set ``execute`` side effects per test."""
    return AsyncMock(spec=CompletionClient)


@pytest.fixture
def make_result() -> Callable[..., CompletionResult]:
    """Factory for successful completion results."""

    def _make(
        content: str = "Kekuatan utama Anda adalah berpikir analitis.",
        model: str = PRIMARY_MODEL,
        cost: float = 0.0,
        is_free_model: bool = True,
    ) -> CompletionResult:
        return CompletionResult(
            content=content,
            model=model,
            requested_model=model,
            usage=TokenUsage(
                prompt_tokens=120,
                completion_tokens=40,
                total_tokens=160,
                cost=cost,
                is_free_model=is_free_model,
            ),
            processing_time_ms=850,
            finish_reason="stop",
        )

    return _make
