"""Collaborator interfaces consumed by the context assembler."""

from typing import Any, Protocol

from pydantic import BaseModel, Field

PERSONA_CONTEXT_TYPE = "career_guidance"


class ConversationRecord(BaseModel):
    """Conversation as returned by the persistence layer.

    Attributes:
        id: Conversation id.
        user_id: Owner of the conversation.
        context_type: "career_guidance", "general" or "assessment".
        context_data: Data stored at creation, may carry "profilePersona".
    """

    id: str = Field(description="Conversation id")
    user_id: str | None = Field(default=None, description="Owning user")
    context_type: str = Field(default="general", description="Context type")
    context_data: dict[str, Any] | None = Field(default=None, description="Creation data")

    @property
    def persona_bearing(self) -> bool:
        """Whether the conversation expects persona context."""
        return self.context_type == PERSONA_CONTEXT_TYPE

    @property
    def embedded_persona(self) -> dict[str, Any] | None:
        """Persona stored with the conversation at creation, if any."""
        if not self.context_data:
            return None
        return self.context_data.get("profilePersona") or None


class HistoryMessage(BaseModel):
    """A stored message, oldest first in history listings."""

    sender_type: str = Field(description="user, assistant or system")
    content: str = Field(description="Message text")


class ConversationStore(Protocol):
    """Read access to conversations and their message history."""

    async def get_conversation(self, conversation_id: str) -> ConversationRecord | None: ...

    async def get_history(self, conversation_id: str, limit: int) -> list[HistoryMessage]:
        """Return up to ``limit`` most recent messages, oldest first."""
        ...


class PersonaResolver(Protocol):
    """Fallback persona lookup for conversations created without one."""

    async def resolve_persona(self, user_id: str) -> dict[str, Any] | None: ...
