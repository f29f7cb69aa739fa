"""Intent detection for an inbound message."""

from pydantic import BaseModel, Field

from atelier.config.models.generation import GeneratorModelConfig
from atelier.context.models import TurnContext
from atelier.conversation.models import PendingState
from atelier.intents import Intent
from atelier.observability.logging import get_logger
from atelier.prompts.repository import PromptRepository
from atelier.providers.llm.base import ModelMessage
from atelier.providers.llm.structured import StructuredOutputInvoker

logger = get_logger(__name__)

PROMPT_KEY = "intent_classification"


class IntentClassification(BaseModel):
    intent: Intent = Field(..., description="Primary intent of the latest message")


class IntentClassifier:
    """Detects what the user wants.

    Cheap signals win over the model: a tapped button that names an
    intent, a deferred intent the conversation is waiting to resume, or a
    photo sent after the assistant asked for one.
    """

    def __init__(
        self,
        invoker: StructuredOutputInvoker,
        prompts: PromptRepository,
        model_config: GeneratorModelConfig,
    ) -> None:
        self._invoker = invoker
        self._prompts = prompts
        self._model = model_config

    async def classify(self, context: TurnContext) -> Intent:
        """Return the turn's intent.

        Raises:
            UpstreamError, OutputFormatError, OutputValidationError: From the model call
        """
        inbound = context.inbound
        conversation = context.conversation

        from_button = Intent.parse(inbound.button_payload)
        if from_button is not None:
            logger.debug("intent_from_button", intent=from_button.value)
            return from_button

        if conversation.pending == PendingState.ASK_USER_INFO:
            deferred = Intent.parse(conversation.pending_intent)
            if deferred is not None:
                logger.debug("intent_from_pending", intent=deferred.value)
                return deferred

        if inbound.has_image:
            awaited = Intent.parse(conversation.awaiting_image_for)
            if awaited is not None:
                logger.debug("intent_from_awaited_image", intent=awaited.value)
                return awaited

        transcript = context.transcript(self._model.history_limit)
        if inbound.has_image:
            transcript = f"{transcript}\n(The user attached a photo.)".strip()

        result = await self._invoker.invoke(
            [
                ModelMessage.system(self._prompts.get(PROMPT_KEY)),
                ModelMessage.user(transcript or "(empty message)"),
            ],
            IntentClassification,
            model=self._model.model,
            effort=self._model.effort,
            contract_name=PROMPT_KEY,
        )
        logger.info("intent_classified", intent=result.value.intent.value)
        return result.value.intent
