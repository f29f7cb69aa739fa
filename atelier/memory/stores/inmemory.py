"""In-memory implementation of MemoryStore."""

from uuid import UUID

from atelier.memory.models import Memory, MemoryCategory
from atelier.memory.store import MemoryStore


class InMemoryMemoryStore(MemoryStore):
    """In-memory implementation of MemoryStore for testing and development."""

    def __init__(self) -> None:
        self._memories: dict[UUID, Memory] = {}

    async def add_many(self, memories: list[Memory]) -> int:
        for memory in memories:
            self._memories[memory.id] = memory
        return len(memories)

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        category: MemoryCategory | None = None,
    ) -> list[Memory]:
        results = [
            m
            for m in self._memories.values()
            if m.user_id == user_id and (category is None or m.category == category)
        ]
        results.sort(key=lambda m: m.created_at, reverse=True)
        return results
