"""Memory store implementations."""

from atelier.memory.stores.inmemory import InMemoryMemoryStore

__all__ = ["InMemoryMemoryStore"]
