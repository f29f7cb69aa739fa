"""User store implementations."""

from atelier.profile.stores.inmemory import InMemoryUserStore

__all__ = ["InMemoryUserStore"]
