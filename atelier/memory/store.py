"""MemoryStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from atelier.memory.models import Memory, MemoryCategory


class MemoryStore(ABC):
    """Abstract interface for memory storage."""

    @abstractmethod
    async def add_many(self, memories: list[Memory]) -> int:
        """Persist memories, returning how many were stored."""
        pass

    @abstractmethod
    async def list_for_user(
        self,
        user_id: UUID,
        *,
        category: MemoryCategory | None = None,
    ) -> list[Memory]:
        """List a user's memories, newest first."""
        pass
