"""Session lifecycle and turn locking configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class SessionConfig(BaseModel):
    """Conversation session lifecycle."""

    staleness_minutes: float = Field(
        default=30,
        gt=0,
        description="Idle minutes after which an open conversation is rotated",
    )


class LockingConfig(BaseModel):
    """Per-user turn serialization."""

    backend: Literal["inmemory", "redis"] = Field(
        default="inmemory", description="Lock backend"
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", description="Redis URL for the lock backend"
    )
    lock_timeout: int = Field(
        default=120, ge=1, description="Seconds before a held lock auto-expires"
    )
    blocking_timeout: float = Field(
        default=60.0, gt=0, description="Seconds to wait for a held lock"
    )
