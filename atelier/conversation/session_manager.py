"""Conversation session lifecycle.

ConversationSessionManager is the only component that opens, closes or
touches conversations. An OPEN conversation idle for longer than the
staleness threshold is closed and replaced in one atomic store call, and
memory extraction is queued for the closed one in the background.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from atelier.conversation.models import Conversation, utc_now
from atelier.conversation.store import ConversationStore
from atelier.errors import ValidationError
from atelier.jobs.queue import JobQueue
from atelier.observability.logging import get_logger
from atelier.observability.metrics import SESSION_ROTATIONS
from atelier.profile.models import User
from atelier.profile.store import UserStore

logger = get_logger(__name__)

DEFAULT_STALENESS = timedelta(minutes=30)


@dataclass(frozen=True)
class Session:
    """The user and their open conversation for one turn."""

    user: User
    conversation: Conversation
    created: bool = False
    rotated_from: UUID | None = None


class ConversationSessionManager:
    """Owns the OPEN/CLOSED lifecycle of user conversations."""

    def __init__(
        self,
        user_store: UserStore,
        conversation_store: ConversationStore,
        job_queue: JobQueue,
        staleness: timedelta = DEFAULT_STALENESS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the session manager.

        Args:
            user_store: User persistence
            conversation_store: Conversation persistence
            job_queue: Receives memory extraction jobs for closed conversations
            staleness: Idle time after which an open conversation is rotated
            clock: Source of the current time
        """
        self._users = user_store
        self._conversations = conversation_store
        self._jobs = job_queue
        self._staleness = staleness
        self._clock = clock
        self._background: set[asyncio.Task[None]] = set()

    def now(self) -> datetime:
        return self._clock()

    async def get_or_create_session(
        self,
        external_user_id: str,
        display_name: str | None = None,
    ) -> Session:
        """Resolve the user's open conversation, rotating it if stale.

        Raises:
            ValidationError: If external_user_id is empty
            RepositoryError: If the store fails
        """
        if not external_user_id or not external_user_id.strip():
            raise ValidationError("External user id is required")

        user = await self._users.upsert_by_external_id(
            external_user_id.strip(), display_name
        )
        now = self._clock()
        current = await self._conversations.find_latest_open(user.id)

        if current is None:
            conversation = await self._conversations.create(user.id, now)
            logger.info(
                "conversation_created",
                user_id=str(user.id),
                conversation_id=str(conversation.id),
            )
            return Session(user=user, conversation=conversation, created=True)

        idle = now - current.updated_at
        if idle <= self._staleness:
            return Session(user=user, conversation=current)

        replacement = await self._conversations.rotate(current, now)
        SESSION_ROTATIONS.inc()
        logger.info(
            "conversation_rotated",
            user_id=str(user.id),
            closed_conversation_id=str(current.id),
            conversation_id=str(replacement.id),
            idle_seconds=int(idle.total_seconds()),
        )
        self._queue_memory_extraction(user.id, current.id)
        return Session(
            user=user, conversation=replacement, created=True, rotated_from=current.id
        )

    async def record_activity(self, conversation: Conversation) -> Conversation:
        """Persist the conversation with its activity time set to now."""
        conversation.updated_at = self._clock()
        return await self._conversations.save(conversation)

    async def drain(self) -> None:
        """Wait for queued background enqueues to finish."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _queue_memory_extraction(self, user_id: UUID, conversation_id: UUID) -> None:
        task = asyncio.create_task(
            self._jobs.enqueue_memory_extraction(user_id, conversation_id)
        )
        self._background.add(task)
        task.add_done_callback(self._on_enqueue_done)

    def _on_enqueue_done(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "memory_extraction_enqueue_failed",
                error=str(error),
                error_type=type(error).__name__,
            )
