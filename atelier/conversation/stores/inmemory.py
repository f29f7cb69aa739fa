"""In-memory implementation of ConversationStore."""

import asyncio
from datetime import datetime
from uuid import UUID

from atelier.conversation.models import Conversation, ConversationStatus, Message
from atelier.conversation.store import ConversationStore
from atelier.errors import ConflictError, NotFoundError


class InMemoryConversationStore(ConversationStore):
    """In-memory implementation of ConversationStore for testing and development.

    Writes that touch the OPEN set run under one lock so the
    one-open-conversation rule holds across concurrent tasks.
    """

    def __init__(self) -> None:
        self._conversations: dict[UUID, Conversation] = {}
        self._messages: dict[UUID, Message] = {}
        self._lock = asyncio.Lock()

    async def get(self, conversation_id: UUID) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        return conversation.model_copy(deep=True) if conversation else None

    async def find_latest_open(self, user_id: UUID) -> Conversation | None:
        candidates = [
            c
            for c in self._conversations.values()
            if c.user_id == user_id and c.status == ConversationStatus.OPEN
        ]
        if not candidates:
            return None
        latest = max(candidates, key=lambda c: c.updated_at)
        return latest.model_copy(deep=True)

    async def create(self, user_id: UUID, now: datetime) -> Conversation:
        async with self._lock:
            self._ensure_no_open(user_id)
            return self._insert(user_id, now)

    async def rotate(self, stale: Conversation, now: datetime) -> Conversation:
        async with self._lock:
            current = self._conversations.get(stale.id)
            if current is None:
                raise NotFoundError(f"Conversation not found: {stale.id}")
            if current.status != ConversationStatus.OPEN:
                raise ConflictError(f"Conversation already closed: {stale.id}")

            # Both writes happen with no await in between
            current.status = ConversationStatus.CLOSED
            current.closed_at = now
            current.updated_at = now
            return self._insert(current.user_id, now)

    async def save(self, conversation: Conversation) -> Conversation:
        async with self._lock:
            current = self._conversations.get(conversation.id)
            if current is None:
                raise NotFoundError(f"Conversation not found: {conversation.id}")
            # Closing is one-way
            if (
                current.status == ConversationStatus.CLOSED
                and conversation.status != ConversationStatus.CLOSED
            ):
                raise ConflictError(f"Conversation already closed: {conversation.id}")
            self._conversations[conversation.id] = conversation.model_copy(deep=True)
            return conversation

    async def add_message(self, message: Message) -> Message:
        if message.conversation_id not in self._conversations:
            raise NotFoundError(f"Conversation not found: {message.conversation_id}")
        self._messages[message.id] = message.model_copy(deep=True)
        return message

    async def list_recent_messages(self, user_id: UUID, limit: int) -> list[Message]:
        messages = sorted(
            (m for m in self._messages.values() if m.user_id == user_id),
            key=lambda m: m.created_at,
        )
        return [m.model_copy(deep=True) for m in messages[-limit:]] if limit > 0 else []

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        unprocessed_only: bool = False,
    ) -> list[Message]:
        results = [
            m
            for m in self._messages.values()
            if m.conversation_id == conversation_id
            and not (unprocessed_only and m.memories_processed)
        ]
        results.sort(key=lambda m: m.created_at)
        return [m.model_copy(deep=True) for m in results]

    async def mark_memories_processed(self, message_ids: list[UUID]) -> int:
        count = 0
        for message_id in message_ids:
            message = self._messages.get(message_id)
            if message is not None and not message.memories_processed:
                message.memories_processed = True
                count += 1
        return count

    def _ensure_no_open(self, user_id: UUID) -> None:
        for conversation in self._conversations.values():
            if conversation.user_id == user_id and conversation.status == ConversationStatus.OPEN:
                raise ConflictError(f"User {user_id} already has an open conversation")

    def _insert(self, user_id: UUID, now: datetime) -> Conversation:
        conversation = Conversation(user_id=user_id, created_at=now, updated_at=now)
        self._conversations[conversation.id] = conversation
        return conversation.model_copy(deep=True)

    def open_count(self, user_id: UUID) -> int:
        """Number of OPEN conversations for a user. Used by tests."""
        return sum(
            1
            for c in self._conversations.values()
            if c.user_id == user_id and c.status == ConversationStatus.OPEN
        )
