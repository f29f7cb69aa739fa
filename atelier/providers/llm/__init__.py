"""Model provider capability and structured output invocation."""

from atelier.providers.llm.base import (
    AuthenticationError,
    ImagePart,
    ModelError,
    ModelMessage,
    ModelProvider,
    ModelRequest,
    ModelResponse,
    OutputContract,
    ProviderError,
    RateLimitError,
    TextPart,
    ToolInvocation,
    ToolServer,
)
from atelier.providers.llm.mock import MockModelProvider
from atelier.providers.llm.schema import strictify_schema
from atelier.providers.llm.structured import (
    StructuredOutputInvoker,
    StructuredResult,
    ToolUsage,
    contract_schema,
)

__all__ = [
    "AuthenticationError",
    "ImagePart",
    "MockModelProvider",
    "ModelError",
    "ModelMessage",
    "ModelProvider",
    "ModelRequest",
    "ModelResponse",
    "OutputContract",
    "ProviderError",
    "RateLimitError",
    "StructuredOutputInvoker",
    "StructuredResult",
    "TextPart",
    "ToolInvocation",
    "ToolServer",
    "ToolUsage",
    "contract_schema",
    "strictify_schema",
]
