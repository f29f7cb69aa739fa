"""Turn input and the per-turn context passed to every stage."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from atelier.conversation.models import Conversation, Message, MessageRole
from atelier.intents import Intent
from atelier.profile.enums import ProfileField
from atelier.profile.models import User
from atelier.styling.models import ColorAnalysisRecord, WardrobeItem


class InboundMessage(BaseModel):
    """One message received from the messaging channel."""

    model_config = ConfigDict(frozen=True)

    external_user_id: str = Field(..., description="Sender identity on the channel")
    display_name: str | None = Field(default=None, description="Sender profile name")
    text: str = Field(default="", description="Message text")
    image_path: str | None = Field(default=None, description="Stored image location")
    file_id: str | None = Field(
        default=None, description="Model file reference, if already uploaded"
    )
    button_payload: str | None = Field(
        default=None, description="Quick-reply payload the user tapped"
    )

    @field_validator("external_user_id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        return value.strip()

    @property
    def has_image(self) -> bool:
        return bool(self.image_path or self.file_id)


class TurnContext(BaseModel):
    """Everything known about the current turn.

    Built once by ContextHydrator and passed by value. Later stages fill
    in profile, intent and missing fields through with_updates(), which
    returns a new instance.
    """

    model_config = ConfigDict(frozen=True)

    user: User = Field(..., description="Sender")
    conversation: Conversation = Field(..., description="Open conversation")
    inbound: InboundMessage = Field(..., description="Message being answered")
    messages: tuple[Message, ...] = Field(
        default=(), description="Recent turns, oldest first"
    )
    wardrobe: tuple[WardrobeItem, ...] = Field(default=(), description="Wardrobe snapshot")
    latest_color_analysis: ColorAnalysisRecord | None = Field(
        default=None, description="Most recent color analysis"
    )
    intent: Intent | None = Field(default=None, description="Detected intent")
    missing_profile_fields: frozenset[ProfileField] = Field(
        default_factory=frozenset,
        description="Required profile fields with no value",
    )

    def with_updates(self, **changes: object) -> "TurnContext":
        return self.model_copy(update=changes)

    def recent_messages(self, limit: int) -> tuple[Message, ...]:
        """Last `limit` turns, oldest first."""
        return self.messages[-limit:] if limit > 0 else ()

    def transcript(self, limit: int) -> str:
        """Recent turns plus the inbound text as a plain transcript."""
        lines = [
            f"{'User' if m.role == MessageRole.USER else 'Assistant'}: {m.text}"
            for m in self.recent_messages(limit)
            if m.text
        ]
        if self.inbound.text:
            lines.append(f"User: {self.inbound.text}")
        return "\n".join(lines)
