"""AdviceGenerator contract.

Every intent is served by one AdviceGenerator. A generator declares
which context it reads, which profile fields it needs, its result schema
and its version; generate() then runs the same steps for all of them:
build the prompt, make one strict model call, persist the domain record
and format one or two replies.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from atelier.config.models.generation import GeneratorModelConfig
from atelier.context.models import TurnContext
from atelier.conversation.models import MessageRole, utc_now
from atelier.generators.replies import Reply
from atelier.observability.logging import get_logger
from atelier.observability.metrics import GENERATOR_LATENCY
from atelier.profile.enums import ProfileField
from atelier.profile.store import UserStore
from atelier.prompts.repository import PromptRepository
from atelier.providers.llm.base import ModelMessage
from atelier.providers.llm.structured import StructuredOutputInvoker
from atelier.providers.media.base import VisionFileStore
from atelier.styling.indexer import WardrobeIndexer
from atelier.styling.store import StylingStore

logger = get_logger(__name__)

S = TypeVar("S", bound=BaseModel)


class ContextInput(str, Enum):
    """Parts of the turn context a generator feeds to the model."""

    HISTORY = "history"
    PROFILE = "profile"
    WARDROBE = "wardrobe"
    COLOR_ANALYSIS = "color_analysis"
    IMAGE = "image"


@dataclass
class GeneratorDeps:
    """Collaborators shared by all generators."""

    invoker: StructuredOutputInvoker
    prompts: PromptRepository
    styling_store: StylingStore
    user_store: UserStore
    vision_files: VisionFileStore
    clock: Callable[[], datetime] = field(default=utc_now)
    wardrobe_indexer: WardrobeIndexer | None = None


class AdviceGenerator(ABC, Generic[S]):
    """Produces the reply for one intent.

    Subclasses set the class attributes and implement build_prompt() and
    format_reply(). persist() defaults to storing nothing.
    """

    name: str
    version: str = "1"
    prompt_key: str
    domain_schema: type[S]
    context_inputs: frozenset[ContextInput] = frozenset(
        {ContextInput.HISTORY, ContextInput.PROFILE}
    )
    required_profile_fields: frozenset[ProfileField] = frozenset()

    def __init__(self, deps: GeneratorDeps, model_config: GeneratorModelConfig) -> None:
        self._deps = deps
        self._model = model_config

    @property
    def needs_image(self) -> bool:
        return ContextInput.IMAGE in self.context_inputs

    async def generate(self, context: TurnContext) -> list[Reply]:
        """Run the generator for one turn.

        Raises:
            UpstreamError, OutputFormatError, OutputValidationError: From the model call
            RepositoryError: If persisting the result fails
        """
        start = time.perf_counter()
        early = self.precheck(context)
        if early is not None:
            logger.info("advice_generator_short_circuit", generator=self.name)
            return early

        prepared = await self.prepare(context)
        result = await self._deps.invoker.invoke(
            self.build_prompt(context, prepared),
            self.domain_schema,
            model=self._model.model,
            effort=self._model.effort,
            use_tools=self._model.use_tools,
            contract_name=self.name,
        )
        await self.persist(context, result.value, prepared)
        replies = self.format_reply(context, result.value)

        latency = time.perf_counter() - start
        GENERATOR_LATENCY.labels(generator=self.name).observe(latency)
        logger.info(
            "advice_generated",
            generator=self.name,
            version=self.version,
            reply_count=len(replies),
            tool_call_count=result.tool_usage.tool_call_count,
            latency_ms=round(latency * 1000, 1),
        )
        return replies

    def precheck(self, context: TurnContext) -> list[Reply] | None:
        """Return replies to send without calling the model, or None."""
        return None

    async def prepare(self, context: TurnContext) -> Any:
        """Do I/O the prompt depends on; the result reaches build_prompt and persist."""
        return None

    @abstractmethod
    def build_prompt(self, context: TurnContext, prepared: Any) -> list[ModelMessage]:
        """Build the model prompt."""
        pass

    async def persist(self, context: TurnContext, value: S, prepared: Any) -> None:
        """Persist the domain record for a validated result."""
        return None

    @abstractmethod
    def format_reply(self, context: TurnContext, value: S) -> list[Reply]:
        """Turn a validated result into one or two replies."""
        pass

    # Prompt helpers shared by subclasses

    def system_prompt(self) -> ModelMessage:
        return ModelMessage.system(self._deps.prompts.get(self.prompt_key))

    def context_messages(self, context: TurnContext) -> list[ModelMessage]:
        """System messages for every declared context input except images."""
        lines: list[str] = []
        if ContextInput.PROFILE in self.context_inputs:
            gender = context.user.gender
            lines.append(f"UserGender: {gender.value if gender else 'unknown'}")
            if context.user.age_group is not None:
                lines.append(f"UserAgeGroup: {context.user.age_group.value}")
            lines.append(
                f"LastColorAnalysisHoursAgo: {self._hours_since(context.user.last_color_analysis_at)}"
            )
            lines.append(
                f"LastVibeCheckHoursAgo: {self._hours_since(context.user.last_vibe_check_at)}"
            )
        if ContextInput.COLOR_ANALYSIS in self.context_inputs:
            lines.append(f"ColorProfile: {describe_color_profile(context)}")
        if ContextInput.WARDROBE in self.context_inputs:
            lines.append(f"Wardrobe: {describe_wardrobe(context)}")
        return [ModelMessage.system("\n".join(lines))] if lines else []

    def history_messages(self, context: TurnContext) -> list[ModelMessage]:
        if ContextInput.HISTORY not in self.context_inputs:
            return []
        return [
            ModelMessage(
                role="user" if m.role == MessageRole.USER else "assistant",
                content=m.text,
            )
            for m in context.recent_messages(self._model.history_limit)
            if m.text
        ]

    def _hours_since(self, moment: datetime | None) -> str:
        if moment is None:
            return "never"
        hours = (self._deps.clock() - moment).total_seconds() / 3600
        return str(max(int(hours), 0))


def describe_wardrobe(context: TurnContext, limit: int = 40) -> str:
    if not context.wardrobe:
        return "empty"
    items = []
    for item in context.wardrobe[:limit]:
        colors = "/".join(item.colors)
        kind = item.subtype or item.type or item.category
        items.append(f"{item.name} ({kind}{', ' + colors if colors else ''})")
    return "; ".join(items)


def describe_color_profile(context: TurnContext) -> str:
    analysis = context.latest_color_analysis
    if analysis is None:
        return "unknown"
    parts = []
    if analysis.palette_name:
        parts.append(f"palette {analysis.palette_name.value}")
    if analysis.undertone:
        parts.append(f"{analysis.undertone.value.lower()} undertone")
    if analysis.top3_colors:
        parts.append("best " + ", ".join(c.name for c in analysis.top3_colors))
    if analysis.avoid3_colors:
        parts.append("avoid " + ", ".join(c.name for c in analysis.avoid3_colors))
    return "; ".join(parts) or "unknown"
