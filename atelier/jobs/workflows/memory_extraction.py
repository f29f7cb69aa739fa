"""Memory extraction workflow.

Runs after a stale conversation is closed. Reads the messages memory
extraction has not consumed yet, asks the model for durable facts about
the user and stores them. Failures are reported in the output and never
raised, so a bad conversation cannot wedge the worker.
"""

from dataclasses import asdict, dataclass
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from atelier.config.models.generation import GeneratorModelConfig
from atelier.conversation.models import MessageRole
from atelier.conversation.store import ConversationStore
from atelier.errors import AtelierError
from atelier.memory.models import Memory, MemoryCategory
from atelier.memory.store import MemoryStore
from atelier.observability.logging import get_logger
from atelier.prompts.repository import PromptRepository
from atelier.providers.llm.base import ModelMessage
from atelier.providers.llm.structured import StructuredOutputInvoker

logger = get_logger(__name__)

PROMPT_KEY = "memory_extraction"


@dataclass
class ExtractMemoriesInput:
    """Input for memory extraction workflow."""

    user_id: str
    conversation_id: str


@dataclass
class ExtractMemoriesOutput:
    """Output from memory extraction workflow."""

    memories_created: int
    messages_processed: int
    success: bool
    error: str | None = None


class ExtractedMemory(BaseModel):
    key: str = Field(..., description="snake_case fact name")
    value: str = Field(..., description="Fact value")
    category: MemoryCategory = Field(..., description="Fact category")
    confidence: float = Field(..., description="Confidence between 0 and 1")


class MemoryExtraction(BaseModel):
    memories: list[ExtractedMemory] = Field(..., description="Extracted facts")


class ExtractMemoriesWorkflow:
    """Workflow that turns a closed conversation into Memory rows."""

    WORKFLOW_NAME = "extract-memories"

    def __init__(
        self,
        conversation_store: ConversationStore,
        memory_store: MemoryStore,
        invoker: StructuredOutputInvoker,
        prompts: PromptRepository,
        model_config: GeneratorModelConfig,
    ) -> None:
        self._conversations = conversation_store
        self._memories = memory_store
        self._invoker = invoker
        self._prompts = prompts
        self._model = model_config

    async def run(self, input_data: ExtractMemoriesInput) -> ExtractMemoriesOutput:
        """Execute the memory extraction workflow."""
        try:
            user_id = UUID(input_data.user_id)
            conversation_id = UUID(input_data.conversation_id)
        except ValueError as e:
            return ExtractMemoriesOutput(
                memories_created=0,
                messages_processed=0,
                success=False,
                error=f"Invalid UUID: {e}",
            )

        try:
            messages = await self._conversations.list_messages(
                conversation_id, unprocessed_only=True
            )
            user_lines = [
                f"User: {m.text}"
                for m in messages
                if m.role == MessageRole.USER and m.text
            ]
            if not user_lines:
                processed = await self._conversations.mark_memories_processed(
                    [m.id for m in messages]
                )
                logger.info(
                    "memory_extraction_nothing_to_do",
                    conversation_id=str(conversation_id),
                )
                return ExtractMemoriesOutput(
                    memories_created=0, messages_processed=processed, success=True
                )

            result = await self._invoker.invoke(
                [
                    ModelMessage.system(self._prompts.get(PROMPT_KEY)),
                    ModelMessage.user("\n".join(user_lines)),
                ],
                MemoryExtraction,
                model=self._model.model,
                effort=self._model.effort,
                contract_name=PROMPT_KEY,
            )

            memories = [
                Memory(
                    user_id=user_id,
                    key=item.key.strip(),
                    value=item.value.strip(),
                    category=item.category,
                    confidence=min(max(item.confidence, 0.0), 1.0),
                    source_conversation_id=conversation_id,
                )
                for item in result.value.memories
                if item.key.strip() and item.value.strip()
            ]
            created = await self._memories.add_many(memories) if memories else 0
            processed = await self._conversations.mark_memories_processed(
                [m.id for m in messages]
            )
        except AtelierError as e:
            logger.error(
                "memory_extraction_failed",
                conversation_id=str(conversation_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            return ExtractMemoriesOutput(
                memories_created=0,
                messages_processed=0,
                success=False,
                error=str(e),
            )

        logger.info(
            "memory_extraction_complete",
            conversation_id=str(conversation_id),
            memories_created=created,
            messages_processed=processed,
        )
        return ExtractMemoriesOutput(
            memories_created=created, messages_processed=processed, success=True
        )


def register_workflow(
    hatchet: Any,
    workflow_instance: ExtractMemoriesWorkflow,
    event_key: str,
) -> Any:
    """Register the memory extraction workflow with Hatchet.

    Args:
        hatchet: Hatchet SDK instance
        workflow_instance: Configured workflow
        event_key: Event that triggers a run

    Returns:
        Registered workflow
    """

    @hatchet.workflow(name=ExtractMemoriesWorkflow.WORKFLOW_NAME, on_events=[event_key])
    class HatchetExtractMemoriesWorkflow:
        """Hatchet workflow wrapper for memory extraction."""

        @hatchet.step()
        async def extract_memories(self, context: Any) -> dict:
            input_data = context.workflow_input()
            result = await workflow_instance.run(
                ExtractMemoriesInput(
                    user_id=input_data["user_id"],
                    conversation_id=input_data["conversation_id"],
                )
            )
            return asdict(result)

    return HatchetExtractMemoriesWorkflow
