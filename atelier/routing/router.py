"""Intent routing with the pending-profile gate.

When the generator for an intent needs profile fields the user has not
given, the router sends AskUserInfo instead, marks the conversation
ASK_USER_INFO and remembers the intent. On a later turn, once profile
inference has filled the fields, it clears the flag and resumes the
remembered intent.
"""

from dataclasses import dataclass

from atelier.context.models import TurnContext
from atelier.conversation.models import PendingState
from atelier.generators.base import AdviceGenerator
from atelier.generators.registry import GeneratorRegistry
from atelier.intents import Intent
from atelier.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RouteDecision:
    """The generator to run and the context to run it with.

    context.conversation carries the pending-state changes; the caller
    persists it.
    """

    generator: AdviceGenerator
    intent: Intent
    context: TurnContext
    gated: bool = False


class IntentRouter:
    """Selects the generator for a turn."""

    def __init__(self, registry: GeneratorRegistry) -> None:
        self._registry = registry

    def route(self, context: TurnContext, detected: Intent) -> RouteDecision:
        conversation = context.conversation.model_copy(deep=True)
        was_pending = conversation.pending == PendingState.ASK_USER_INFO

        intent = detected
        if was_pending:
            intent = Intent.parse(conversation.pending_intent) or detected

        generator = self._registry.get(intent)
        missing = context.user.missing_fields(generator.required_profile_fields)

        if missing:
            conversation.pending = PendingState.ASK_USER_INFO
            conversation.pending_intent = intent.value
            logger.info(
                "route_gated",
                intent=intent.value,
                missing_fields=sorted(f.value for f in missing),
                repeated=was_pending,
            )
            return RouteDecision(
                generator=self._registry.ask_user_info,
                intent=intent,
                context=context.with_updates(
                    conversation=conversation,
                    intent=intent,
                    missing_profile_fields=missing,
                ),
                gated=True,
            )

        if was_pending:
            conversation.pending = PendingState.NONE
            conversation.pending_intent = None
            logger.info("pending_resolved", intent=intent.value)

        if generator.needs_image:
            conversation.awaiting_image_for = (
                None if context.inbound.has_image else intent.value
            )
        elif conversation.awaiting_image_for is not None:
            conversation.awaiting_image_for = None

        logger.info("route_selected", intent=intent.value, generator=generator.name)
        return RouteDecision(
            generator=generator,
            intent=intent,
            context=context.with_updates(
                conversation=conversation,
                intent=intent,
                missing_profile_fields=frozenset(),
            ),
        )
