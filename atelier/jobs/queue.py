"""Job queue for post-conversation background work."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import asdict
from uuid import UUID

from atelier.jobs.client import HatchetClient
from atelier.jobs.workflows.memory_extraction import ExtractMemoriesInput
from atelier.observability.logging import get_logger

logger = get_logger(__name__)


class JobQueue(ABC):
    """Accepts background jobs. Callers never wait for the job itself."""

    @abstractmethod
    async def enqueue_memory_extraction(
        self, user_id: UUID, conversation_id: UUID
    ) -> None:
        """Queue memory extraction for a closed conversation."""
        pass


class InMemoryJobQueue(JobQueue):
    """Records queued jobs for testing and single-process development."""

    def __init__(self) -> None:
        self.memory_extractions: list[ExtractMemoriesInput] = []

    async def enqueue_memory_extraction(
        self, user_id: UUID, conversation_id: UUID
    ) -> None:
        self.memory_extractions.append(
            ExtractMemoriesInput(user_id=str(user_id), conversation_id=str(conversation_id))
        )


class HatchetJobQueue(JobQueue):
    """Pushes job events to Hatchet.

    A worker running ExtractMemoriesWorkflow subscribes to the event key.
    """

    def __init__(self, client: HatchetClient) -> None:
        self._client = client

    @property
    def is_available(self) -> bool:
        return self._client.get_client() is not None

    async def enqueue_memory_extraction(
        self, user_id: UUID, conversation_id: UUID
    ) -> None:
        hatchet = self._client.get_client()
        if hatchet is None:
            logger.warning(
                "memory_extraction_not_queued",
                reason="hatchet_unavailable",
                conversation_id=str(conversation_id),
            )
            return

        payload = asdict(
            ExtractMemoriesInput(user_id=str(user_id), conversation_id=str(conversation_id))
        )
        # The SDK push call is blocking
        await asyncio.to_thread(
            hatchet.event.push, self._client.config.memory_extraction_event, payload
        )
        logger.info("memory_extraction_queued", conversation_id=str(conversation_id))
