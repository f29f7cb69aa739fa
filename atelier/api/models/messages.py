"""Inbound message and turn result models for the messages endpoint."""

from uuid import UUID

from pydantic import BaseModel, Field

from atelier.context.models import InboundMessage
from atelier.conversation.models import PendingState
from atelier.engine import TurnResult
from atelier.generators.replies import Reply
from atelier.intents import Intent


class MessageRequest(BaseModel):
    """A message received from the messaging channel."""

    external_user_id: str = Field(..., description="Sender identifier on the channel")
    display_name: str | None = Field(default=None, description="Sender profile name")
    text: str = Field(default="", description="Message text")
    image_path: str | None = Field(default=None, description="Local path of an attached image")
    file_id: str | None = Field(default=None, description="Provider file id of an attached image")
    button_payload: str | None = Field(default=None, description="Payload of a tapped button")

    def to_inbound(self) -> InboundMessage:
        return InboundMessage(**self.model_dump())


class MessageResponse(BaseModel):
    """Replies for the channel plus turn metadata."""

    replies: list[Reply]
    conversation_id: UUID | None = None
    intent: Intent | None = None
    generator: str | None = None
    pending: PendingState | None = None
    new_conversation: bool = False
    error: str | None = None

    @classmethod
    def from_result(cls, result: TurnResult) -> "MessageResponse":
        return cls(
            replies=result.replies,
            conversation_id=result.conversation_id,
            intent=result.intent,
            generator=result.generator,
            pending=result.pending,
            new_conversation=result.new_conversation,
            error=result.error,
        )
