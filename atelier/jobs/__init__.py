"""Background job infrastructure.

Usage:
    from atelier.jobs import HatchetClient, HatchetJobQueue

    queue = HatchetJobQueue(HatchetClient(settings.jobs.hatchet))
    await queue.enqueue_memory_extraction(user_id, conversation_id)
"""

from atelier.jobs.client import HatchetClient
from atelier.jobs.queue import HatchetJobQueue, InMemoryJobQueue, JobQueue

__all__ = ["HatchetClient", "HatchetJobQueue", "InMemoryJobQueue", "JobQueue"]
