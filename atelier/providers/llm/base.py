"""Model provider interface, request/response types and error types.

A provider exposes exactly one capability, invoke(), which takes a
strict output contract and returns the raw text payload plus a trace of
the tools the model called.
"""

from abc import ABC, abstractmethod
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from atelier.errors import UpstreamError

Role = Literal["system", "user", "assistant"]


class TextPart(BaseModel):
    """Plain text content."""

    type: Literal["text"] = "text"
    text: str = Field(..., description="Text content")


class ImagePart(BaseModel):
    """An image the provider already holds, referenced by file id."""

    type: Literal["image"] = "image"
    file_id: str = Field(..., description="Provider file reference")
    detail: Literal["auto", "low", "high"] = Field(
        default="high", description="Vision detail level"
    )


ContentPart = Annotated[TextPart | ImagePart, Field(discriminator="type")]


class ModelMessage(BaseModel):
    """A message in a model prompt."""

    role: Role = Field(..., description="Role: system, user, or assistant")
    content: str | list[ContentPart] = Field(..., description="Message content")

    @classmethod
    def system(cls, text: str) -> "ModelMessage":
        return cls(role="system", content=text)

    @classmethod
    def user(cls, text: str) -> "ModelMessage":
        return cls(role="user", content=text)

    @classmethod
    def image(cls, file_id: str, text: str | None = None) -> "ModelMessage":
        parts: list[TextPart | ImagePart] = []
        if text:
            parts.append(TextPart(text=text))
        parts.append(ImagePart(file_id=file_id))
        return cls(role="user", content=parts)


class OutputContract(BaseModel):
    """A strict JSON schema the model output must satisfy."""

    name: str = Field(default="structured_output", description="Contract name")
    json_schema: dict[str, Any] = Field(..., description="Strictified JSON schema")


class ToolServer(BaseModel):
    """A remote MCP server whose tools the model may call."""

    server_label: str = Field(..., description="Label shown to the model")
    server_url: str = Field(..., description="MCP endpoint")
    allowed_tools: list[str] = Field(..., description="Tool allow-list")


class ModelRequest(BaseModel):
    """Everything a provider needs for one structured call."""

    model: str = Field(..., description="Model identifier")
    messages: list[ModelMessage] = Field(..., description="Prompt messages")
    contract: OutputContract = Field(..., description="Output contract")
    tools: list[ToolServer] = Field(default_factory=list, description="Tool servers")
    effort: str | None = Field(default=None, description="Reasoning effort hint")


class ToolInvocation(BaseModel):
    """One tool call observed in a provider response."""

    name: str = Field(..., description="Tool name")
    type: str = Field(default="mcp_call", description="Provider node type")


class ModelResponse(BaseModel):
    """Raw provider output before parsing."""

    text: str = Field(..., description="Text payload")
    model: str = Field(..., description="Model used")
    tool_trace: list[ToolInvocation] = Field(
        default_factory=list, description="Tools the model invoked"
    )
    raw_response: dict[str, Any] | None = Field(
        default=None, description="Raw provider response"
    )


class ModelProvider(ABC):
    """Injected capability for structured model calls."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def invoke(self, request: ModelRequest) -> ModelResponse:
        """Run one model call under the request's output contract.

        Raises:
            ProviderError: If the provider cannot serve the request
        """
        pass


# ============================================================================
# Error Types
# ============================================================================


class ProviderError(UpstreamError):
    """Base exception for model provider errors."""

    pass


class AuthenticationError(ProviderError):
    """Invalid or missing API key."""

    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    pass


class ModelError(ProviderError):
    """Model not found or unavailable."""

    pass
