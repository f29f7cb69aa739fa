"""Reply variants sent back to the messaging channel."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class TextReply(BaseModel):
    """Plain text message."""

    type: Literal["text"] = "text"
    text: str = Field(..., min_length=1, description="Message text")


class QuickReplyButton(BaseModel):
    """A tappable button; its payload comes back on the next turn."""

    title: str = Field(..., max_length=20, description="Button label")
    payload: str = Field(..., description="Value sent back when tapped")


class QuickReply(BaseModel):
    """Text with up to three buttons."""

    type: Literal["quick_reply"] = "quick_reply"
    text: str = Field(..., min_length=1, description="Message text")
    buttons: list[QuickReplyButton] = Field(
        ..., min_length=1, max_length=3, description="Buttons"
    )


class ImageReply(BaseModel):
    """An image with an optional caption."""

    type: Literal["image"] = "image"
    media_url: str = Field(..., description="Image URL")
    caption: str | None = Field(default=None, description="Caption")


Reply = Annotated[TextReply | QuickReply | ImageReply, Field(discriminator="type")]


def text_replies(primary: str, followup: str | None = None) -> list[Reply]:
    """A primary text reply plus an optional short follow-up."""
    replies: list[Reply] = [TextReply(text=primary)]
    if followup and followup.strip():
        replies.append(TextReply(text=followup.strip()))
    return replies


def require_text(value: str) -> str:
    """Validator body for model text that is sent to the user verbatim."""
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value
