"""Turn context and its hydration."""

from atelier.context.hydrator import ContextHydrator
from atelier.context.models import InboundMessage, TurnContext

__all__ = ["ContextHydrator", "InboundMessage", "TurnContext"]
