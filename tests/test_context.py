"""Tests for context assembly and persona resolution."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from guider.config import ArchiveSettings, ContextSettings
from guider.context.archive import ArchivePersonaResolver
from guider.context.assembler import ContextAssembler
from guider.context.sources import ConversationRecord, HistoryMessage, PersonaResolver
from guider.exceptions import ConversationNotFoundError, PersonaResolutionError
from guider.llm.models import Role
from guider.prompts import texts

PERSONA = {"archetype": "The Analyst", "strengths": ["Analytical thinking"]}


def _history(count: int) -> list[HistoryMessage]:
    return [
        HistoryMessage(
            sender_type="user" if i % 2 == 0 else "assistant",
            content=f"pesan {i}",
        )
        for i in range(count)
    ]


def _resolver(persona: dict | None = None) -> AsyncMock:
    resolver = AsyncMock(spec=PersonaResolver)
    resolver.resolve_persona.return_value = persona
    return resolver


class TestConversationRecord:
    """Tests for ConversationRecord helpers."""

    def test_embedded_persona(self) -> None:
        """profilePersona is read from context data."""
        record = ConversationRecord(id="c", context_data={"profilePersona": PERSONA})
        assert record.embedded_persona == PERSONA

    def test_no_context_data(self) -> None:
        """Missing context data means no embedded persona."""
        assert ConversationRecord(id="c").embedded_persona is None

    def test_persona_bearing(self) -> None:
        """Only career guidance conversations expect a persona."""
        assert ConversationRecord(id="c", context_type="career_guidance").persona_bearing
        assert not ConversationRecord(id="c", context_type="general").persona_bearing


class TestContextAssembler:
    """Tests for ContextAssembler.build."""

    async def test_fixed_order(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """Role, reinforcement, persona, history, then the user turn."""
        assembler = ContextAssembler(store, settings=context_settings)

        context = await assembler.build("conv-1", "Apa kekuatan saya?")

        assert [m.role for m in context] == [
            Role.SYSTEM,
            Role.SYSTEM,
            Role.SYSTEM,
            Role.USER,
            Role.ASSISTANT,
            Role.USER,
        ]
        assert context[0].content == texts.CAREER_GUIDER
        assert context[1].content == texts.ROLE_REINFORCEMENT
        assert context[2].content.startswith(texts.PERSONA_HEADER)
        assert '"archetype": "The Analyst"' in context[2].content
        assert context[-1].content == "Apa kekuatan saya?"

    async def test_conversation_not_found(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """Unknown conversations raise."""
        store.get_conversation.return_value = None
        assembler = ContextAssembler(store, settings=context_settings)

        with pytest.raises(ConversationNotFoundError):
            await assembler.build("missing", "Halo")

    async def test_general_context_has_no_persona(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """General conversations use the general prompt and skip the archive."""
        store.get_conversation.return_value = ConversationRecord(
            id="conv-2", user_id="user-1", context_type="general"
        )
        resolver = _resolver(PERSONA)
        assembler = ContextAssembler(store, resolver, settings=context_settings)

        context = await assembler.build("conv-2", "Halo")

        assert context[0].content == texts.GENERAL_CAREER
        assert not any(texts.PERSONA_HEADER in m.content for m in context[2:])
        resolver.resolve_persona.assert_not_called()

    async def test_embedded_persona_wins(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """The archive is not consulted when the conversation has a persona."""
        resolver = _resolver({"archetype": "Other"})
        assembler = ContextAssembler(store, resolver, settings=context_settings)

        context = await assembler.build("conv-1", "Halo")

        resolver.resolve_persona.assert_not_called()
        persona_turns = [m for m in context if texts.PERSONA_HEADER in m.content]
        assert len(persona_turns) == 1
        assert "The Analyst" in persona_turns[0].content

    async def test_archive_fallback(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """Persona comes from the archive when the conversation has none."""
        store.get_conversation.return_value = ConversationRecord(
            id="conv-3", user_id="user-1", context_type="career_guidance", context_data={}
        )
        resolver = _resolver(PERSONA)
        assembler = ContextAssembler(store, resolver, settings=context_settings)

        context = await assembler.build("conv-3", "Halo")

        resolver.resolve_persona.assert_awaited_once_with("user-1")
        assert context[2].content.startswith(texts.ARCHIVE_PERSONA_HEADER)

    async def test_archive_failure_is_absorbed(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """A failing archive lookup leaves the persona out."""
        store.get_conversation.return_value = ConversationRecord(
            id="conv-3", user_id="user-1", context_type="career_guidance"
        )
        resolver = AsyncMock(spec=PersonaResolver)
        resolver.resolve_persona.side_effect = PersonaResolutionError("Archive down")
        assembler = ContextAssembler(store, resolver, settings=context_settings)

        context = await assembler.build("conv-3", "Halo")

        assert len(context) == 5
        assert context[2].role == Role.USER

    async def test_no_persona_anywhere(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """Absent persona from every source still builds a context."""
        store.get_conversation.return_value = ConversationRecord(
            id="conv-3", user_id="user-1", context_type="career_guidance"
        )
        assembler = ContextAssembler(store, _resolver(None), settings=context_settings)

        context = await assembler.build("conv-3", "Halo")

        assert [m.role for m in context[:2]] == [Role.SYSTEM, Role.SYSTEM]
        assert context[2].role == Role.USER

    async def test_history_bound_keeps_newest(self, store: AsyncMock) -> None:
        """Only the newest turns survive truncation, oldest first."""
        store.get_history.return_value = _history(9)
        settings = ContextSettings(max_history_turns=4, history_fetch_limit=10)
        assembler = ContextAssembler(store, settings=settings)

        context = await assembler.build("conv-1", "Halo")

        history = [m.content for m in context[3:-1]]
        assert history == ["pesan 5", "pesan 6", "pesan 7", "pesan 8"]
        store.get_history.assert_awaited_once_with("conv-1", 10)

    async def test_zero_history(self, store: AsyncMock) -> None:
        """A zero bound skips history entirely."""
        assembler = ContextAssembler(
            store, settings=ContextSettings(max_history_turns=0)
        )

        context = await assembler.build("conv-1", "Halo")

        store.get_history.assert_not_called()
        assert len(context) == 4

    async def test_empty_history_messages_skipped(
        self, store: AsyncMock, context_settings: ContextSettings
    ) -> None:
        """Blank stored messages are not sent upstream."""
        store.get_history.return_value = [
            HistoryMessage(sender_type="user", content="Halo"),
            HistoryMessage(sender_type="assistant", content=""),
        ]
        assembler = ContextAssembler(store, settings=context_settings)

        context = await assembler.build("conv-1", "Lagi")

        assert [m.content for m in context[3:]] == ["Halo", "Lagi"]

    def test_build_introduction(self, store: AsyncMock) -> None:
        """Introduction context is instructions, persona, greeting."""
        assembler = ContextAssembler(store, settings=ContextSettings())

        context = assembler.build_introduction(PERSONA)

        assert [m.role for m in context] == [Role.SYSTEM, Role.SYSTEM, Role.USER]
        assert context[0].content == texts.INITIAL_CONVERSATION
        assert context[1].content.startswith(texts.INTRODUCTION_PERSONA_HEADER)
        assert context[2].content == texts.INITIAL_GREETING


class TestArchivePersonaResolver:
    """Tests for the archive-backed persona resolver."""

    @staticmethod
    def _response(data: object) -> MagicMock:
        mock_response = MagicMock()
        mock_response.json.return_value = data
        mock_response.raise_for_status = MagicMock()
        return mock_response

    async def test_resolves_latest_persona(self) -> None:
        """Persona profile of the newest completed result is returned."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.get.return_value = self._response(
            {
                "success": True,
                "data": {"results": [{"user_id": "user-1", "persona_profile": PERSONA}]},
            }
        )
        resolver = ArchivePersonaResolver(settings=ArchiveSettings(), client=mock_client)

        persona = await resolver.resolve_persona("user-1")

        assert persona == PERSONA
        call = mock_client.get.call_args
        assert call.args[0] == "/archive/results/results"
        assert call.kwargs["params"] == {
            "page": 1,
            "limit": 1,
            "status": "completed",
            "sort": "created_at",
            "order": "desc",
        }
        assert call.kwargs["headers"] == {"X-User-ID": "user-1"}

    async def test_no_results(self) -> None:
        """No completed assessment means no persona."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.get.return_value = self._response({"success": True, "data": {"results": []}})
        resolver = ArchivePersonaResolver(settings=ArchiveSettings(), client=mock_client)

        assert await resolver.resolve_persona("user-1") is None

    async def test_other_users_result_ignored(self) -> None:
        """A result owned by someone else is never used."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.get.return_value = self._response(
            {
                "success": True,
                "data": {"results": [{"user_id": "user-2", "persona_profile": PERSONA}]},
            }
        )
        resolver = ArchivePersonaResolver(settings=ArchiveSettings(), client=mock_client)

        assert await resolver.resolve_persona("user-1") is None

    async def test_http_error(self) -> None:
        """Non-2xx status raises PersonaResolutionError."""
        mock_response = MagicMock()
        mock_response.status_code = 500
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error", request=MagicMock(), response=mock_response
        )
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.get.return_value = mock_response
        resolver = ArchivePersonaResolver(settings=ArchiveSettings(), client=mock_client)

        with pytest.raises(PersonaResolutionError) as exc_info:
            await resolver.resolve_persona("user-1")

        assert exc_info.value.details["status_code"] == 500

    async def test_transport_error(self) -> None:
        """Connection failure raises PersonaResolutionError."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.get.side_effect = httpx.ConnectError("Connection refused")
        resolver = ArchivePersonaResolver(settings=ArchiveSettings(), client=mock_client)

        with pytest.raises(PersonaResolutionError):
            await resolver.resolve_persona("user-1")
