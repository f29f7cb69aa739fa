"""Asks the user for profile fields another generator needs."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from atelier.context.models import TurnContext
from atelier.generators.base import AdviceGenerator, ContextInput
from atelier.generators.replies import (
    QuickReply,
    QuickReplyButton,
    Reply,
    TextReply,
    require_text,
)
from atelier.profile.enums import Gender, ProfileField
from atelier.profile.inference import GENDER_PAYLOAD_PREFIX
from atelier.providers.llm.base import ModelMessage

FIELD_LABELS: dict[ProfileField, str] = {
    ProfileField.GENDER: "gender",
    ProfileField.AGE_GROUP: "age group",
}

GENDER_BUTTONS = [
    QuickReplyButton(title="Male", payload=f"{GENDER_PAYLOAD_PREFIX}{Gender.MALE.value}"),
    QuickReplyButton(title="Female", payload=f"{GENDER_PAYLOAD_PREFIX}{Gender.FEMALE.value}"),
]


class AskUserInfoOutput(BaseModel):
    text: str = Field(..., description="One short question for the user")

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        return require_text(value)


def join_fields(fields: frozenset[ProfileField]) -> str:
    """Human list of field labels, e.g. "gender and age group"."""
    labels = sorted(FIELD_LABELS[f] for f in fields)
    if len(labels) <= 1:
        return "".join(labels)
    return ", ".join(labels[:-1]) + " and " + labels[-1]


class AskUserInfoGenerator(AdviceGenerator[AskUserInfoOutput]):
    """Writes one question asking for the turn's missing profile fields."""

    name = "ask_user_info"
    prompt_key = "ask_user_info"
    domain_schema = AskUserInfoOutput
    context_inputs = frozenset({ContextInput.HISTORY})

    def build_prompt(self, context: TurnContext, prepared: Any) -> list[ModelMessage]:
        return [
            self.system_prompt(),
            *self.history_messages(context),
            ModelMessage.user(context.inbound.text or "(image only)"),
            ModelMessage.system(
                f"Missing fields: {join_fields(context.missing_profile_fields)}"
            ),
        ]

    def format_reply(self, context: TurnContext, value: AskUserInfoOutput) -> list[Reply]:
        if ProfileField.GENDER in context.missing_profile_fields:
            return [QuickReply(text=value.text, buttons=GENDER_BUTTONS)]
        return [TextReply(text=value.text)]
