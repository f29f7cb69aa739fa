"""Conversational advice generators configured per intent.

Pairing, occasion, vacation and general chat differ only in prompt,
context and required profile fields, so they share one class.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from atelier.config.models.generation import GeneratorModelConfig
from atelier.context.models import TurnContext
from atelier.generators.base import AdviceGenerator, ContextInput, GeneratorDeps
from atelier.generators.replies import Reply, require_text, text_replies
from atelier.profile.enums import ProfileField
from atelier.providers.llm.base import ModelMessage


class AdviceOutput(BaseModel):
    """Model output for text advice."""

    reply_text: str = Field(..., description="Advice for the user")
    followup_text: str | None = Field(..., description="Optional short follow-up")

    @field_validator("reply_text")
    @classmethod
    def _reply_not_blank(cls, value: str) -> str:
        return require_text(value)


@dataclass(frozen=True)
class TextAdviceSpec:
    """Static description of one text advice generator."""

    name: str
    prompt_key: str
    context_inputs: frozenset[ContextInput]
    required_profile_fields: frozenset[ProfileField] = frozenset()
    version: str = "1"


_STYLING_INPUTS = frozenset(
    {
        ContextInput.HISTORY,
        ContextInput.PROFILE,
        ContextInput.WARDROBE,
        ContextInput.COLOR_ANALYSIS,
    }
)

PAIRING = TextAdviceSpec(
    name="pairing",
    prompt_key="pairing",
    context_inputs=_STYLING_INPUTS,
    required_profile_fields=frozenset({ProfileField.GENDER}),
)
OCCASION = TextAdviceSpec(
    name="occasion",
    prompt_key="occasion",
    context_inputs=_STYLING_INPUTS,
    required_profile_fields=frozenset({ProfileField.GENDER}),
)
VACATION = TextAdviceSpec(
    name="vacation",
    prompt_key="vacation",
    context_inputs=_STYLING_INPUTS,
    required_profile_fields=frozenset({ProfileField.GENDER}),
)
GENERAL = TextAdviceSpec(
    name="general",
    prompt_key="general",
    context_inputs=frozenset({ContextInput.HISTORY, ContextInput.PROFILE}),
)


class TextAdviceGenerator(AdviceGenerator[AdviceOutput]):
    """Answers a styling question in text. Persists nothing."""

    domain_schema = AdviceOutput

    def __init__(
        self,
        spec: TextAdviceSpec,
        deps: GeneratorDeps,
        model_config: GeneratorModelConfig,
    ) -> None:
        super().__init__(deps, model_config)
        self.name = spec.name
        self.version = spec.version
        self.prompt_key = spec.prompt_key
        self.context_inputs = spec.context_inputs
        self.required_profile_fields = spec.required_profile_fields

    def build_prompt(self, context: TurnContext, prepared: Any) -> list[ModelMessage]:
        messages = [
            self.system_prompt(),
            *self.context_messages(context),
            *self.history_messages(context),
        ]
        question = context.inbound.text or "(no text, the user only sent an image)"
        messages.append(ModelMessage.user(question))
        return messages

    def format_reply(self, context: TurnContext, value: AdviceOutput) -> list[Reply]:
        return text_replies(value.reply_text, value.followup_text)
