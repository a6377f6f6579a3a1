"""Context assembler: builds the ordered turns sent upstream."""

import json
from enum import Enum
from typing import Any

from guider.config import ContextSettings, get_settings
from guider.context.sources import (
    ConversationRecord,
    ConversationStore,
    HistoryMessage,
    PersonaResolver,
)
from guider.exceptions import ConversationNotFoundError
from guider.llm.models import Message, Role
from guider.logging_config import get_logger
from guider.prompts.library import PromptKey, PromptLibrary, default_prompt_library

logger = get_logger(__name__)


class PersonaSource(str, Enum):
    """Where the persona context came from, for audit logs."""

    CONVERSATION = "conversation"
    ARCHIVE = "archive_fallback"
    NONE = "none"


class ContextAssembler:
    """Builds the exact context for one turn.

    Order is fixed: role definition, reinforcement, persona (when resolved),
    bounded history oldest first, then the new user turn. Persona is
    injected at most once and is never required for the turn to proceed.
    """

    def __init__(
        self,
        store: ConversationStore,
        persona_resolver: PersonaResolver | None = None,
        library: PromptLibrary | None = None,
        settings: ContextSettings | None = None,
    ) -> None:
        """Initialize the assembler.

        Args:
            store: Conversation and history source.
            persona_resolver: Archive lookup used when the conversation
                carries no persona.
            library: Prompt library supplying the fixed texts.
            settings: History bounds.
        """
        self._store = store
        self._persona_resolver = persona_resolver
        self._library = library or default_prompt_library()
        self._settings = settings or get_settings().context

    async def build(
        self,
        conversation_id: str,
        user_text: str | None = None,
        *,
        user_id: str | None = None,
    ) -> list[Message]:
        """Assemble context for a conversation turn.

        Args:
            conversation_id: Conversation to build context for.
            user_text: New user turn appended last, if given.
            user_id: Used for the persona lookup when the conversation
                record carries no owner.

        Returns:
            Ordered messages.

        Raises:
            ConversationNotFoundError: If the conversation does not exist.
        """
        conversation = await self._store.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)

        persona_text, persona_source = await self._resolve_persona(
            conversation, conversation.user_id or user_id
        )

        context: list[Message] = [
            Message(
                role=Role.SYSTEM,
                content=self._library.system_prompt_for(conversation.context_type),
            ),
            Message(
                role=Role.SYSTEM,
                content=self._library.text(PromptKey.ROLE_REINFORCEMENT),
            ),
        ]
        if persona_text:
            context.append(Message(role=Role.SYSTEM, content=persona_text))

        history = await self._history(conversation_id)
        context.extend(history)

        if user_text is not None:
            context.append(Message(role=Role.USER, content=user_text))

        logger.info(
            "Context built",
            extra={
                "conversation_id": conversation_id,
                "history_turns": len(history),
                "persona_source": persona_source.value,
            },
        )
        return context

    def build_introduction(self, persona: dict[str, Any]) -> list[Message]:
        """Context for the scripted first turn of a new persona conversation."""
        return [
            Message(
                role=Role.SYSTEM,
                content=self._library.text(PromptKey.INITIAL_CONVERSATION),
            ),
            Message(
                role=Role.SYSTEM,
                content=self._persona_turn(PromptKey.INTRODUCTION_PERSONA_HEADER, persona),
            ),
            Message(
                role=Role.USER,
                content=self._library.text(PromptKey.INITIAL_GREETING),
            ),
        ]

    async def _resolve_persona(
        self,
        conversation: ConversationRecord,
        user_id: str | None,
    ) -> tuple[str | None, PersonaSource]:
        """Apply the persona priority: embedded, archive, none."""
        embedded = conversation.embedded_persona
        if embedded:
            return self._persona_turn(PromptKey.PERSONA_HEADER, embedded), PersonaSource.CONVERSATION

        if not conversation.persona_bearing or self._persona_resolver is None or not user_id:
            return None, PersonaSource.NONE

        logger.warning(
            "No persona stored with conversation, trying archive",
            extra={"conversation_id": conversation.id},
        )
        try:
            persona = await self._persona_resolver.resolve_persona(user_id)
        except Exception as e:
            logger.error(
                f"Persona resolution failed, continuing without persona: {e}",
                extra={"conversation_id": conversation.id, "user_id": user_id},
            )
            return None, PersonaSource.NONE

        if not persona:
            logger.warning(
                "No persona available from any source",
                extra={"conversation_id": conversation.id},
            )
            return None, PersonaSource.NONE

        return self._persona_turn(PromptKey.ARCHIVE_PERSONA_HEADER, persona), PersonaSource.ARCHIVE

    async def _history(self, conversation_id: str) -> list[Message]:
        """Prior turns, oldest first, keeping only the newest ones."""
        limit = self._settings.max_history_turns
        if limit == 0:
            return []

        stored = await self._store.get_history(
            conversation_id, max(limit, self._settings.history_fetch_limit)
        )
        turns = [_to_message(item) for item in stored if item.content]
        return turns[-limit:]

    def _persona_turn(self, header: PromptKey, persona: dict[str, Any]) -> str:
        body = json.dumps(persona, indent=2, ensure_ascii=False)
        return f"{self._library.text(header)}\n{body}"


def _to_message(item: HistoryMessage) -> Message:
    role = Role.USER if item.sender_type == "user" else Role.ASSISTANT
    return Message(role=role, content=item.content)
