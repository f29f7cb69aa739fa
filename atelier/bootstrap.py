"""Bootstrap: assemble the conversation core from settings.

Creates stores, providers, generators and the TurnEngine in one place so
the API, the worker and tests share the same wiring.

Example usage:

    from atelier.bootstrap import build_components
    from atelier.config import get_settings

    components = build_components(get_settings())
    result = await components.engine.handle_message(
        InboundMessage(external_user_id="15551234567", text="Hi!")
    )
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

import redis.asyncio as redis

from atelier.config.settings import Settings
from atelier.context.hydrator import ContextHydrator
from atelier.conversation.models import utc_now
from atelier.conversation.mutex import InMemoryTurnMutex, RedisTurnMutex, TurnMutex
from atelier.conversation.session_manager import ConversationSessionManager
from atelier.conversation.store import ConversationStore
from atelier.conversation.stores.inmemory import InMemoryConversationStore
from atelier.engine import TurnEngine
from atelier.generators.base import GeneratorDeps
from atelier.generators.registry import GeneratorRegistry, build_registry
from atelier.jobs.client import HatchetClient
from atelier.jobs.queue import HatchetJobQueue, InMemoryJobQueue, JobQueue
from atelier.jobs.workflows.memory_extraction import ExtractMemoriesWorkflow
from atelier.memory.store import MemoryStore
from atelier.memory.stores.inmemory import InMemoryMemoryStore
from atelier.observability.logging import get_logger
from atelier.profile.inference import ProfileInferenceEngine
from atelier.profile.store import UserStore
from atelier.profile.stores.inmemory import InMemoryUserStore
from atelier.prompts.repository import FilePromptRepository, PromptRepository
from atelier.providers.llm import MockModelProvider, ModelProvider, StructuredOutputInvoker
from atelier.providers.llm.openai import OpenAIResponsesProvider
from atelier.providers.media import MockVisionFileStore, VisionFileStore
from atelier.providers.media.openai import OpenAIVisionFileStore
from atelier.routing.classifier import IntentClassifier
from atelier.routing.router import IntentRouter
from atelier.styling.indexer import WardrobeIndexer
from atelier.styling.store import StylingStore
from atelier.styling.stores.inmemory import InMemoryStylingStore

logger = get_logger(__name__)


@dataclass
class Components:
    """Everything a running service needs, exposed for tests and workers."""

    engine: TurnEngine
    session_manager: ConversationSessionManager
    user_store: UserStore
    conversation_store: ConversationStore
    styling_store: StylingStore
    memory_store: MemoryStore
    job_queue: JobQueue
    provider: ModelProvider
    vision_files: VisionFileStore
    invoker: StructuredOutputInvoker
    prompts: PromptRepository
    registry: GeneratorRegistry
    mutex: TurnMutex
    memory_workflow: ExtractMemoriesWorkflow


def create_provider(settings: Settings) -> ModelProvider:
    """Create the configured model provider."""
    models = settings.models
    if models.provider == "mock":
        logger.warning("model_provider_mock", reason="config")
        return MockModelProvider()
    api_key = models.api_key.get_secret_value() if models.api_key else None
    return OpenAIResponsesProvider(api_key=api_key)


def create_vision_files(settings: Settings) -> VisionFileStore:
    """Create the vision file store matching the model provider."""
    if settings.models.provider == "mock":
        return MockVisionFileStore()
    models = settings.models
    api_key = models.api_key.get_secret_value() if models.api_key else None
    return OpenAIVisionFileStore(api_key=api_key)


def create_mutex(settings: Settings) -> TurnMutex:
    """Create the per-user turn mutex for the configured backend."""
    locking = settings.locking
    if locking.backend == "redis":
        client = redis.from_url(locking.redis_url)
        logger.info("turn_mutex_initialized", backend="redis")
        return RedisTurnMutex(
            client,
            lock_timeout=locking.lock_timeout,
            blocking_timeout=locking.blocking_timeout,
        )
    return InMemoryTurnMutex(blocking_timeout=locking.blocking_timeout)


def create_job_queue(settings: Settings) -> JobQueue:
    """Create the job queue; Hatchet when enabled, otherwise in-process."""
    hatchet = settings.jobs.hatchet
    if hatchet.enabled:
        return HatchetJobQueue(HatchetClient(hatchet))
    return InMemoryJobQueue()


def build_components(
    settings: Settings,
    *,
    provider: ModelProvider | None = None,
    vision_files: VisionFileStore | None = None,
    job_queue: JobQueue | None = None,
    mutex: TurnMutex | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> Components:
    """Wire the conversation core.

    Args:
        settings: Application settings
        provider: Model provider override
        vision_files: Vision file store override
        job_queue: Job queue override
        mutex: Turn mutex override
        clock: Source of the current time

    Returns:
        Components with a ready TurnEngine
    """
    provider = provider or create_provider(settings)
    vision_files = vision_files or create_vision_files(settings)
    job_queue = job_queue or create_job_queue(settings)
    mutex = mutex or create_mutex(settings)

    user_store = InMemoryUserStore()
    conversation_store = InMemoryConversationStore()
    styling_store = InMemoryStylingStore()
    memory_store = InMemoryMemoryStore()
    prompts = FilePromptRepository(settings.prompts.directory)

    invoker = StructuredOutputInvoker(
        provider,
        tools=settings.tools,
        timeout_seconds=settings.models.timeout_seconds,
    )
    deps = GeneratorDeps(
        invoker=invoker,
        prompts=prompts,
        styling_store=styling_store,
        user_store=user_store,
        vision_files=vision_files,
        clock=clock,
        wardrobe_indexer=WardrobeIndexer(
            invoker,
            styling_store,
            prompts,
            settings.models.for_generator("wardrobe_index"),
        ),
    )
    registry = build_registry(deps, settings.models)

    session_manager = ConversationSessionManager(
        user_store,
        conversation_store,
        job_queue,
        staleness=timedelta(minutes=settings.session.staleness_minutes),
        clock=clock,
    )
    history_limit = max(
        settings.models.for_generator(name).history_limit
        for name in [intent.value for intent in registry.intents()] + ["ask_user_info"]
    )
    profile_config = settings.models.for_generator("profile_inference")
    engine = TurnEngine(
        session_manager=session_manager,
        hydrator=ContextHydrator(
            conversation_store, styling_store, history_limit=history_limit
        ),
        inference=ProfileInferenceEngine(
            invoker,
            user_store,
            prompts,
            profile_config,
            history_limit=min(profile_config.history_limit, history_limit),
        ),
        classifier=IntentClassifier(
            invoker, prompts, settings.models.for_generator("intent_classification")
        ),
        router=IntentRouter(registry),
        conversation_store=conversation_store,
        mutex=mutex,
    )
    memory_workflow = ExtractMemoriesWorkflow(
        conversation_store,
        memory_store,
        invoker,
        prompts,
        settings.models.for_generator("memory_extraction"),
    )

    logger.info(
        "components_built",
        provider=provider.provider_name,
        locking=settings.locking.backend,
        intents=[intent.value for intent in registry.intents()],
    )
    return Components(
        engine=engine,
        session_manager=session_manager,
        user_store=user_store,
        conversation_store=conversation_store,
        styling_store=styling_store,
        memory_store=memory_store,
        job_queue=job_queue,
        provider=provider,
        vision_files=vision_files,
        invoker=invoker,
        prompts=prompts,
        registry=registry,
        mutex=mutex,
        memory_workflow=memory_workflow,
    )
