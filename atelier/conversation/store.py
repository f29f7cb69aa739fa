"""ConversationStore abstract interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from atelier.conversation.models import Conversation, Message


class ConversationStore(ABC):
    """Abstract interface for conversation and message storage.

    Implementations must keep at most one OPEN conversation per user.
    rotate() is the only multi-record write and must be atomic.
    """

    @abstractmethod
    async def get(self, conversation_id: UUID) -> Conversation | None:
        """Get a conversation by ID."""
        pass

    @abstractmethod
    async def find_latest_open(self, user_id: UUID) -> Conversation | None:
        """Get the most recently updated OPEN conversation for a user."""
        pass

    @abstractmethod
    async def create(self, user_id: UUID, now: datetime) -> Conversation:
        """Create an OPEN conversation.

        Raises:
            ConflictError: If the user already has an OPEN conversation
        """
        pass

    @abstractmethod
    async def rotate(self, stale: Conversation, now: datetime) -> Conversation:
        """Close a stale conversation and open its replacement atomically.

        Raises:
            ConflictError: If the stale conversation is no longer OPEN
        """
        pass

    @abstractmethod
    async def save(self, conversation: Conversation) -> Conversation:
        """Persist pending-state and activity changes.

        Raises:
            NotFoundError: If the conversation does not exist
            ConflictError: If a closed conversation would be reopened
        """
        pass

    @abstractmethod
    async def add_message(self, message: Message) -> Message:
        """Append a message to its conversation."""
        pass

    @abstractmethod
    async def list_recent_messages(self, user_id: UUID, limit: int) -> list[Message]:
        """Return the user's last `limit` messages in chronological order."""
        pass

    @abstractmethod
    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        unprocessed_only: bool = False,
    ) -> list[Message]:
        """Return a conversation's messages in chronological order."""
        pass

    @abstractmethod
    async def mark_memories_processed(self, message_ids: list[UUID]) -> int:
        """Flag messages as consumed by memory extraction, returning the count."""
        pass
