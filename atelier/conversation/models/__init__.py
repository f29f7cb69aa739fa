"""Conversation domain models."""

from atelier.conversation.models.conversation import Conversation, Message, utc_now
from atelier.conversation.models.enums import (
    ConversationStatus,
    MessageRole,
    PendingState,
)

__all__ = [
    "Conversation",
    "ConversationStatus",
    "Message",
    "MessageRole",
    "PendingState",
    "utc_now",
]
