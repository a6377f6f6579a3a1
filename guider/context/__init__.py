"""Conversation context module."""

from guider.context.archive import ArchivePersonaResolver
from guider.context.assembler import ContextAssembler, PersonaSource
from guider.context.sources import (
    ConversationRecord,
    ConversationStore,
    HistoryMessage,
    PersonaResolver,
)

__all__ = [
    "ArchivePersonaResolver",
    "ContextAssembler",
    "ConversationRecord",
    "ConversationStore",
    "HistoryMessage",
    "PersonaResolver",
    "PersonaSource",
]
