"""Memory domain: facts remembered about users across conversations."""

from atelier.memory.models import Memory, MemoryCategory
from atelier.memory.store import MemoryStore

__all__ = ["Memory", "MemoryCategory", "MemoryStore"]
