"""Conversation and message models."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from atelier.conversation.models.enums import (
    ConversationStatus,
    MessageRole,
    PendingState,
)


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Conversation(BaseModel):
    """One session of back-and-forth with a user.

    A user has at most one OPEN conversation at a time. An idle one is
    closed and replaced rather than reopened.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    user_id: UUID = Field(..., description="Owning user")
    status: ConversationStatus = Field(
        default=ConversationStatus.OPEN, description="Lifecycle status"
    )
    pending: PendingState = Field(
        default=PendingState.NONE, description="Router gate for the next turn"
    )
    pending_intent: str | None = Field(
        default=None,
        description="Intent deferred while profile data is collected",
    )
    awaiting_image_for: str | None = Field(
        default=None,
        description="Intent that asked for a photo and is waiting for one",
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last activity")
    closed_at: datetime | None = Field(default=None, description="When it was closed")


class Message(BaseModel):
    """A single turn entry inside a conversation."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    conversation_id: UUID = Field(..., description="Owning conversation")
    user_id: UUID = Field(..., description="Owning user")
    role: MessageRole = Field(..., description="Author")
    text: str = Field(default="", description="Message text")
    image_path: str | None = Field(default=None, description="Stored image location")
    file_id: str | None = Field(default=None, description="Model-usable file reference")
    button_payload: str | None = Field(
        default=None, description="Quick-reply payload the user tapped"
    )
    intent: str | None = Field(default=None, description="Intent the turn was routed to")
    memories_processed: bool = Field(
        default=False, description="Whether memory extraction consumed this message"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
