"""Long-term memory facts about a user."""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class MemoryCategory(str, Enum):
    """What a remembered fact is about."""

    PROFILE = "profile"
    PREFERENCE = "preference"
    STYLE = "style"
    COLOR = "color"
    SIZE = "size"
    OCCASION = "occasion"
    BRAND = "brand"
    OTHER = "other"


class Memory(BaseModel):
    """A key/value fact extracted from a closed conversation."""

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    user_id: UUID = Field(..., description="User the fact is about")
    key: str = Field(..., min_length=1, description="Fact name, e.g. shoe_size")
    value: str = Field(..., description="Fact value")
    category: MemoryCategory = Field(
        default=MemoryCategory.OTHER, description="Fact category"
    )
    confidence: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Extraction confidence"
    )
    source_conversation_id: UUID | None = Field(
        default=None, description="Conversation the fact came from"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
