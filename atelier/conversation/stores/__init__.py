"""Conversation store implementations."""

from atelier.conversation.stores.inmemory import InMemoryConversationStore

__all__ = ["InMemoryConversationStore"]
