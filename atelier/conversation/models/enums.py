"""Enums for the conversation domain."""

from enum import Enum


class ConversationStatus(str, Enum):
    """Lifecycle status. Transitions are OPEN to CLOSED only."""

    OPEN = "open"
    CLOSED = "closed"


class PendingState(str, Enum):
    """Conversation flag gating the intent router."""

    NONE = "none"
    ASK_USER_INFO = "ask_user_info"


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"
