"""Conversation domain: sessions, messages and turn serialization."""

from atelier.conversation.models import (
    Conversation,
    ConversationStatus,
    Message,
    MessageRole,
    PendingState,
)
from atelier.conversation.store import ConversationStore

__all__ = [
    "Conversation",
    "ConversationStatus",
    "ConversationStore",
    "Message",
    "MessageRole",
    "PendingState",
]
