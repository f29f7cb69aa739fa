"""Concurrent context hydration."""

import asyncio
import time

from atelier.context.models import InboundMessage, TurnContext
from atelier.conversation.models import Conversation
from atelier.conversation.store import ConversationStore
from atelier.observability.logging import get_logger
from atelier.profile.models import User
from atelier.styling.store import StylingStore

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 12


class ContextHydrator:
    """Gathers recent turns, wardrobe and color profile for a turn.

    The three reads are independent and run concurrently. Hydration is
    all-or-nothing: if any read fails the whole call fails, so advice is
    never generated on partial context.
    """

    def __init__(
        self,
        conversation_store: ConversationStore,
        styling_store: StylingStore,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._conversations = conversation_store
        self._styling = styling_store
        self._history_limit = history_limit

    async def hydrate(
        self,
        user: User,
        conversation: Conversation,
        inbound: InboundMessage,
        *,
        history_limit: int | None = None,
    ) -> TurnContext:
        """Build the turn context for a user.

        Raises:
            RepositoryError: If any of the reads fails
        """
        limit = history_limit or self._history_limit
        start = time.perf_counter()

        messages, wardrobe, latest_color_analysis = await asyncio.gather(
            self._conversations.list_recent_messages(user.id, limit),
            self._styling.list_wardrobe(user.id),
            self._styling.get_latest_color_analysis(user.id),
        )

        logger.info(
            "context_hydrated",
            message_count=len(messages),
            wardrobe_count=len(wardrobe),
            has_color_analysis=latest_color_analysis is not None,
            latency_ms=round((time.perf_counter() - start) * 1000, 1),
        )

        return TurnContext(
            user=user,
            conversation=conversation,
            inbound=inbound,
            messages=tuple(messages),
            wardrobe=tuple(wardrobe),
            latest_color_analysis=latest_color_analysis,
        )
