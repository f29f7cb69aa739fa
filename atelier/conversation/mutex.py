"""Per-user turn mutex.

Turns from the same user run one at a time so two messages arriving
together cannot race on the open-conversation lookup or the pending
state. Locks are keyed by the user's external id.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from redis.asyncio import Redis
from redis.exceptions import LockError

from atelier.observability.logging import get_logger

logger = get_logger(__name__)


class TurnMutex(ABC):
    """Mutual exclusion for turns of one user."""

    @abstractmethod
    def acquire(
        self,
        key: str,
        blocking_timeout: float | None = None,
    ) -> AbstractAsyncContextManager[bool]:
        """Async context manager yielding True if the lock was acquired.

        Usage:
            async with mutex.acquire(external_user_id) as acquired:
                if acquired:
                    ...
        """
        pass


class InMemoryTurnMutex(TurnMutex):
    """asyncio locks for single-process deployments and tests."""

    def __init__(self, blocking_timeout: float = 60.0) -> None:
        self._blocking_timeout = blocking_timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(
        self,
        key: str,
        blocking_timeout: float | None = None,
    ) -> AsyncGenerator[bool, None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(
                    lock.acquire(), timeout=blocking_timeout or self._blocking_timeout
                )
                acquired = True
            except TimeoutError:
                acquired = False
            try:
                yield acquired
            finally:
                if acquired:
                    lock.release()
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


class RedisTurnMutex(TurnMutex):
    """Redis-backed distributed lock for multi-process deployments.

    Lock key format: turnlock:{external_user_id}
    """

    def __init__(
        self,
        redis: Redis,
        lock_timeout: int = 120,
        blocking_timeout: float = 60.0,
    ):
        """Initialize the mutex.

        Args:
            redis: Redis client instance
            lock_timeout: How long a lock is held before auto-release (seconds)
            blocking_timeout: How long to wait when trying to acquire (seconds)
        """
        self._redis = redis
        self._lock_timeout = lock_timeout
        self._blocking_timeout = blocking_timeout

    def _key(self, key: str) -> str:
        return f"turnlock:{key}"

    @asynccontextmanager
    async def acquire(
        self,
        key: str,
        blocking_timeout: float | None = None,
    ) -> AsyncGenerator[bool, None]:
        lock = self._redis.lock(
            self._key(key),
            timeout=self._lock_timeout,
            blocking_timeout=blocking_timeout or self._blocking_timeout,
        )

        acquired = await lock.acquire()
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await lock.release()
                except LockError as e:
                    # Expired while the turn ran; another holder may own it now
                    logger.warning("turn_lock_release_failed", error=str(e))

    async def is_locked(self, key: str) -> bool:
        return await self._redis.exists(self._key(key)) > 0
