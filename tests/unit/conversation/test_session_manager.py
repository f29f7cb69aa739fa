"""Tests for ConversationSessionManager."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from atelier.conversation.models import ConversationStatus
from atelier.conversation.session_manager import ConversationSessionManager
from atelier.conversation.stores.inmemory import InMemoryConversationStore
from atelier.errors import RepositoryError, ValidationError
from atelier.jobs.queue import InMemoryJobQueue
from atelier.profile.stores.inmemory import InMemoryUserStore

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def job_queue() -> InMemoryJobQueue:
    return InMemoryJobQueue()


@pytest.fixture
def manager(
    user_store: InMemoryUserStore,
    conversation_store: InMemoryConversationStore,
    job_queue: InMemoryJobQueue,
    clock: FakeClock,
) -> ConversationSessionManager:
    return ConversationSessionManager(
        user_store,
        conversation_store,
        job_queue,
        staleness=timedelta(minutes=30),
        clock=clock,
    )


class TestGetOrCreateSession:
    """Tests for session resolution."""

    @pytest.mark.asyncio
    async def test_new_user_gets_open_conversation(
        self, manager: ConversationSessionManager
    ) -> None:
        """Should create the user and an OPEN conversation."""
        session = await manager.get_or_create_session("15551230000", "Ana")

        assert session.created is True
        assert session.user.display_name == "Ana"
        assert session.conversation.status == ConversationStatus.OPEN
        assert session.conversation.user_id == session.user.id

    @pytest.mark.asyncio
    async def test_fresh_conversation_reused(
        self, manager: ConversationSessionManager, clock: FakeClock
    ) -> None:
        """Should keep the same conversation 29 minutes later."""
        first = await manager.get_or_create_session("15551230000")
        clock.advance(timedelta(minutes=29))

        second = await manager.get_or_create_session("15551230000")

        assert second.conversation.id == first.conversation.id
        assert second.created is False

    @pytest.mark.asyncio
    async def test_exact_threshold_not_stale(
        self, manager: ConversationSessionManager, clock: FakeClock
    ) -> None:
        """Should rotate only when idle time exceeds the threshold."""
        first = await manager.get_or_create_session("15551230000")
        clock.advance(timedelta(minutes=30))

        second = await manager.get_or_create_session("15551230000")

        assert second.conversation.id == first.conversation.id

    @pytest.mark.asyncio
    async def test_stale_conversation_rotated(
        self,
        manager: ConversationSessionManager,
        conversation_store: InMemoryConversationStore,
        job_queue: InMemoryJobQueue,
        clock: FakeClock,
    ) -> None:
        """Should close the old conversation and open a new one 31 minutes later."""
        first = await manager.get_or_create_session("15551230000")
        clock.advance(timedelta(minutes=31))

        second = await manager.get_or_create_session("15551230000")
        await manager.drain()

        assert second.conversation.id != first.conversation.id
        assert second.rotated_from == first.conversation.id
        closed = await conversation_store.get(first.conversation.id)
        assert closed.status == ConversationStatus.CLOSED
        assert conversation_store.open_count(second.user.id) == 1
        assert [job.conversation_id for job in job_queue.memory_extractions] == [
            str(first.conversation.id)
        ]

    @pytest.mark.asyncio
    async def test_activity_keeps_conversation_fresh(
        self, manager: ConversationSessionManager, clock: FakeClock
    ) -> None:
        """Should measure staleness from the last recorded activity."""
        first = await manager.get_or_create_session("15551230000")
        clock.advance(timedelta(minutes=20))
        await manager.record_activity(first.conversation)
        clock.advance(timedelta(minutes=20))

        second = await manager.get_or_create_session("15551230000")

        assert second.conversation.id == first.conversation.id

    @pytest.mark.asyncio
    async def test_enqueue_failure_does_not_fail_request(
        self,
        user_store: InMemoryUserStore,
        conversation_store: InMemoryConversationStore,
        clock: FakeClock,
    ) -> None:
        """Should log enqueue failures without failing the turn."""
        queue = AsyncMock()
        queue.enqueue_memory_extraction.side_effect = RuntimeError("queue down")
        manager = ConversationSessionManager(
            user_store, conversation_store, queue, clock=clock
        )
        await manager.get_or_create_session("15551230000")
        clock.advance(timedelta(hours=2))

        session = await manager.get_or_create_session("15551230000")
        await manager.drain()

        assert session.created is True
        queue.enqueue_memory_extraction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_display_name_merged(self, manager: ConversationSessionManager) -> None:
        """Should update the display name without creating a new user."""
        first = await manager.get_or_create_session("15551230000", "Ana")
        second = await manager.get_or_create_session("15551230000", "Ana Maria")

        assert second.user.id == first.user.id
        assert second.user.display_name == "Ana Maria"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("external_id", ["", "   "])
    async def test_blank_id_rejected(
        self, manager: ConversationSessionManager, external_id: str
    ) -> None:
        """Should raise ValidationError for a blank external id."""
        with pytest.raises(ValidationError):
            await manager.get_or_create_session(external_id)

    @pytest.mark.asyncio
    async def test_store_failure_propagates(
        self, user_store: InMemoryUserStore, job_queue: InMemoryJobQueue
    ) -> None:
        """Should propagate store failures unchanged."""
        broken = AsyncMock()
        broken.find_latest_open.side_effect = RepositoryError("db down")
        manager = ConversationSessionManager(user_store, broken, job_queue)

        with pytest.raises(RepositoryError):
            await manager.get_or_create_session("15551230000")
