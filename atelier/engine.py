"""Turn engine.

One inbound message drives one turn: resolve the session, hydrate
context, update the profile, detect the intent, route, generate, and
record the exchange. Turns of the same user are serialized by a
TurnMutex. Store, provider and output-contract failures end the turn
with a generic apology; a bad caller identity is raised to the caller.
"""

import time
from uuid import UUID

from pydantic import BaseModel, Field

from atelier.context.hydrator import ContextHydrator
from atelier.context.models import InboundMessage, TurnContext
from atelier.conversation.models import Message, MessageRole, PendingState
from atelier.conversation.mutex import TurnMutex
from atelier.conversation.session_manager import ConversationSessionManager, Session
from atelier.conversation.store import ConversationStore
from atelier.errors import TURN_FAILURES, AtelierError, RepositoryError, ValidationError
from atelier.generators.replies import ImageReply, QuickReply, Reply, TextReply
from atelier.intents import Intent
from atelier.observability.logging import bind_turn_context, clear_turn_context, get_logger
from atelier.observability.metrics import TURN_LATENCY, TURNS
from atelier.profile.inference import ProfileInferenceEngine
from atelier.routing.classifier import IntentClassifier
from atelier.routing.router import IntentRouter, RouteDecision

logger = get_logger(__name__)

GENERIC_FAILURE_REPLY = "Sorry, something went wrong on my side. Please try again in a moment."


class TurnResult(BaseModel):
    """What a turn produced."""

    replies: list[Reply] = Field(..., description="Replies to send, in order")
    conversation_id: UUID | None = Field(default=None, description="Open conversation")
    user_id: UUID | None = Field(default=None, description="Sender")
    intent: Intent | None = Field(default=None, description="Routed intent")
    generator: str | None = Field(default=None, description="Generator that replied")
    pending: PendingState | None = Field(default=None, description="Pending state after the turn")
    new_conversation: bool = Field(default=False, description="Whether the turn opened a conversation")
    error: str | None = Field(default=None, description="Failure kind when the turn failed")


class TurnEngine:
    """Runs turns end to end."""

    def __init__(
        self,
        session_manager: ConversationSessionManager,
        hydrator: ContextHydrator,
        inference: ProfileInferenceEngine,
        classifier: IntentClassifier,
        router: IntentRouter,
        conversation_store: ConversationStore,
        mutex: TurnMutex,
    ) -> None:
        self._sessions = session_manager
        self._hydrator = hydrator
        self._inference = inference
        self._classifier = classifier
        self._router = router
        self._conversations = conversation_store
        self._mutex = mutex

    async def handle_message(self, inbound: InboundMessage) -> TurnResult:
        """Process one inbound message.

        Raises:
            ValidationError: If the sender identity is empty
        """
        if not inbound.external_user_id:
            raise ValidationError("External user id is required")

        start = time.perf_counter()
        async with self._mutex.acquire(inbound.external_user_id) as acquired:
            try:
                if not acquired:
                    return self._failed(None, RepositoryError("Timed out waiting for turn lock"))
                return await self._run(inbound)
            finally:
                TURN_LATENCY.observe(time.perf_counter() - start)
                clear_turn_context()

    async def _run(self, inbound: InboundMessage) -> TurnResult:
        session: Session | None = None
        try:
            session = await self._sessions.get_or_create_session(
                inbound.external_user_id, inbound.display_name
            )
            bind_turn_context(
                conversation_id=str(session.conversation.id),
                user_id=str(session.user.id),
            )

            context = await self._hydrator.hydrate(
                session.user, session.conversation, inbound
            )
            user = await self._inference.infer_profile(context)
            context = context.with_updates(user=user)

            intent = await self._classifier.classify(context)
            decision = self._router.route(context, intent)
            replies = await decision.generator.generate(decision.context)

            conversation = await self._sessions.record_activity(
                decision.context.conversation
            )
            await self._record_exchange(decision, replies)
        except TURN_FAILURES as e:
            return self._failed(session, e)

        TURNS.labels(intent=decision.intent.value, outcome="success").inc()
        logger.info(
            "turn_complete",
            intent=decision.intent.value,
            generator=decision.generator.name,
            gated=decision.gated,
            pending=conversation.pending.value,
        )
        return TurnResult(
            replies=replies,
            conversation_id=conversation.id,
            user_id=session.user.id,
            intent=decision.intent,
            generator=decision.generator.name,
            pending=conversation.pending,
            new_conversation=session.created,
        )

    async def _record_exchange(self, decision: RouteDecision, replies: list[Reply]) -> None:
        context: TurnContext = decision.context
        inbound = context.inbound
        now = self._sessions.now()
        await self._conversations.add_message(
            Message(
                conversation_id=context.conversation.id,
                user_id=context.user.id,
                role=MessageRole.USER,
                text=inbound.text,
                image_path=inbound.image_path,
                file_id=inbound.file_id,
                button_payload=inbound.button_payload,
                intent=decision.intent.value,
                created_at=now,
            )
        )
        for reply in replies:
            await self._conversations.add_message(
                Message(
                    conversation_id=context.conversation.id,
                    user_id=context.user.id,
                    role=MessageRole.ASSISTANT,
                    text=reply_text(reply),
                    intent=decision.intent.value,
                    created_at=now,
                )
            )

    def _failed(self, session: Session | None, error: AtelierError) -> TurnResult:
        TURNS.labels(intent="unknown", outcome="failed").inc()
        logger.error(
            "turn_failed",
            error=str(error),
            error_type=type(error).__name__,
        )
        return TurnResult(
            replies=[TextReply(text=GENERIC_FAILURE_REPLY)],
            conversation_id=session.conversation.id if session else None,
            user_id=session.user.id if session else None,
            new_conversation=session.created if session else False,
            error=type(error).__name__,
        )


def reply_text(reply: Reply) -> str:
    """Text stored in the transcript for a reply."""
    if isinstance(reply, TextReply | QuickReply):
        return reply.text
    if isinstance(reply, ImageReply):
        return reply.caption or ""
    return ""
