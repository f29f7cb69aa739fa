"""Profile inference.

Decides the user's gender and age group for advice tailoring. A value the
user states is stored as confirmed; one the model guesses is stored as
inferred and never displaces a confirmed value. Model failures are not
fatal here: the profile simply stays unresolved for this turn.
"""

import re

from pydantic import BaseModel, Field

from atelier.config.models.generation import GeneratorModelConfig
from atelier.context.models import TurnContext
from atelier.errors import OutputFormatError, OutputValidationError, UpstreamError
from atelier.observability.logging import get_logger
from atelier.observability.metrics import PROFILE_INFERENCES
from atelier.profile.enums import AgeGroup, Gender
from atelier.profile.models import User
from atelier.profile.store import UserStore
from atelier.prompts.repository import PromptRepository
from atelier.providers.llm.base import ModelMessage
from atelier.providers.llm.structured import StructuredOutputInvoker

logger = get_logger(__name__)

PROMPT_KEY = "profile_inference"
GENDER_PAYLOAD_PREFIX = "gender:"

_SELF = r"\b(?:i\s*am|i'?m|i’m|im)\s+"
_STATED_GENDER: tuple[tuple[re.Pattern[str], Gender], ...] = (
    (re.compile(_SELF + r"(?:an?\s+)?(?:woman|female|girl|lady)\b", re.IGNORECASE), Gender.FEMALE),
    (
        re.compile(_SELF + r"(?:an?\s+)?(?:man|male|guy|boy|gentleman)\b", re.IGNORECASE),
        Gender.MALE,
    ),
)
# "I'm 34", "I am 34 years old", "im 19 y/o"; a bare number must end the clause
_STATED_AGE = re.compile(
    _SELF + r"(\d{1,2})(?:\s*(?:years?\s+old|yrs?\s+old|y/?o)\b|(?=\s*(?:[.,!?;]|$)))",
    re.IGNORECASE,
)

# Upper bound of each bracket, ascending
_AGE_BRACKETS: tuple[tuple[int, AgeGroup], ...] = (
    (17, AgeGroup.AGE_13_17),
    (25, AgeGroup.AGE_18_25),
    (35, AgeGroup.AGE_26_35),
    (45, AgeGroup.AGE_36_45),
    (55, AgeGroup.AGE_46_55),
)


class ProfileInference(BaseModel):
    """Model output for profile inference."""

    inferred_gender: Gender | None = Field(
        ..., description="Gender supported by the conversation, or null"
    )
    confirmed: bool = Field(
        ..., description="True only if the user stated their gender explicitly"
    )
    inferred_age_group: AgeGroup | None = Field(
        default=None, description="Age group supported by the conversation, or null"
    )


def detect_stated_gender(text: str | None, button_payload: str | None = None) -> Gender | None:
    """Return a gender the user explicitly stated this turn, if any."""
    if button_payload and button_payload.startswith(GENDER_PAYLOAD_PREFIX):
        try:
            return Gender(button_payload[len(GENDER_PAYLOAD_PREFIX):])
        except ValueError:
            pass
    if not text:
        return None
    for pattern, gender in _STATED_GENDER:
        if pattern.search(text):
            return gender
    return None


def age_group_for(age: int) -> AgeGroup | None:
    """Bracket for an age in years; None below 13."""
    if age < 13:
        return None
    for upper, group in _AGE_BRACKETS:
        if age <= upper:
            return group
    return AgeGroup.AGE_55_PLUS


def detect_stated_age_group(text: str | None) -> AgeGroup | None:
    """Return the age group of an age the user stated this turn, if any."""
    if not text:
        return None
    match = _STATED_AGE.search(text)
    if match is None:
        return None
    return age_group_for(int(match.group(1)))


def _merge(user: User, field: str, value: object, confirmed: bool) -> bool:
    confirmed_field = f"confirmed_{field}"
    inferred_field = f"inferred_{field}"
    if value is None:
        return False
    if confirmed:
        if getattr(user, confirmed_field) == value and getattr(user, inferred_field) is None:
            return False
        setattr(user, confirmed_field, value)
        setattr(user, inferred_field, None)
        return True
    if getattr(user, confirmed_field) is not None or getattr(user, inferred_field) == value:
        return False
    setattr(user, inferred_field, value)
    return True


def merge_gender(user: User, gender: Gender | None, confirmed: bool) -> bool:
    """Merge a gender observation into the user, returning whether it changed.

    A confirmed observation replaces everything. An unconfirmed one only
    fills inferred_gender, and only while nothing is confirmed.
    """
    return _merge(user, "gender", gender, confirmed)


def merge_age_group(user: User, age_group: AgeGroup | None, confirmed: bool) -> bool:
    """Merge an age group observation with the same rules as merge_gender."""
    return _merge(user, "age_group", age_group, confirmed)


class ProfileInferenceEngine:
    """Owns the gender and age group fields of a User.

    The model is only consulted while the gender is unknown; the age group
    it reports in the same call is merged as an inference.
    """

    def __init__(
        self,
        invoker: StructuredOutputInvoker,
        user_store: UserStore,
        prompts: PromptRepository,
        model_config: GeneratorModelConfig,
        history_limit: int = 6,
    ) -> None:
        self._invoker = invoker
        self._users = user_store
        self._prompts = prompts
        self._model = model_config
        self._history_limit = history_limit

    async def infer_profile(self, context: TurnContext) -> User:
        """Return the user with profile fields resolved as far as this turn allows.

        Raises:
            RepositoryError: If the updated user cannot be saved
        """
        user = context.user.model_copy(deep=True)
        inbound = context.inbound

        changed = merge_age_group(user, detect_stated_age_group(inbound.text), confirmed=True)

        stated = detect_stated_gender(inbound.text, inbound.button_payload)
        if stated is not None:
            PROFILE_INFERENCES.labels(outcome="stated").inc()
            changed = merge_gender(user, stated, confirmed=True) or changed
            return await self._save(user, changed, source="stated")

        if user.gender is not None:
            PROFILE_INFERENCES.labels(outcome="known").inc()
            return await self._save(user, changed, source="stated")

        transcript = context.transcript(self._history_limit)
        if not transcript:
            PROFILE_INFERENCES.labels(outcome="no_evidence").inc()
            return await self._save(user, changed, source="stated")

        try:
            result = await self._invoker.invoke(
                [
                    ModelMessage.system(self._prompts.get(PROMPT_KEY)),
                    ModelMessage.user(transcript),
                ],
                ProfileInference,
                model=self._model.model,
                effort=self._model.effort,
                contract_name=PROMPT_KEY,
            )
        except (UpstreamError, OutputFormatError, OutputValidationError) as e:
            PROFILE_INFERENCES.labels(outcome="failed").inc()
            logger.warning(
                "profile_inference_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return await self._save(user, changed, source="stated")

        inference = result.value
        outcome = "unresolved" if inference.inferred_gender is None else "inferred"
        PROFILE_INFERENCES.labels(outcome=outcome).inc()
        changed = (
            merge_gender(user, inference.inferred_gender, inference.confirmed) or changed
        )
        changed = merge_age_group(user, inference.inferred_age_group, confirmed=False) or changed
        return await self._save(user, changed, source="model")

    async def _save(self, user: User, changed: bool, *, source: str) -> User:
        if not changed:
            return user
        saved = await self._users.save(user)
        logger.info(
            "profile_updated",
            gender=user.gender.value if user.gender else None,
            gender_confirmed=user.confirmed_gender is not None,
            age_group=user.age_group.value if user.age_group else None,
            source=source,
        )
        return saved
