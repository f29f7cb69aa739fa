"""Styling store implementations."""

from atelier.styling.stores.inmemory import InMemoryStylingStore

__all__ = ["InMemoryStylingStore"]
