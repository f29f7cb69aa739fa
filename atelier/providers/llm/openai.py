"""OpenAI Responses API provider."""

import os
from typing import Any

import openai
from openai import AsyncOpenAI

from atelier.observability.logging import get_logger
from atelier.providers.llm.base import (
    AuthenticationError,
    ImagePart,
    ModelError,
    ModelMessage,
    ModelProvider,
    ModelRequest,
    ModelResponse,
    ProviderError,
    RateLimitError,
    ToolInvocation,
)

logger = get_logger(__name__)

TOOL_NODE_TYPES = frozenset({"tool_use", "tool_result", "tool", "mcp_call"})


class OpenAIResponsesProvider(ModelProvider):
    """Model provider backed by the OpenAI Responses API.

    The output contract is sent as a strict json_schema text format and
    tool servers are attached as MCP tools that never require approval.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 120.0,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            timeout: HTTP request timeout in seconds
            client: Preconfigured client, mainly for tests
        """
        if client is None:
            api_key = api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY environment variable not set")
            client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._client = client

    @property
    def provider_name(self) -> str:
        return "openai"

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        kwargs: dict[str, Any] = {
            "model": request.model,
            "input": [self._to_input(message) for message in request.messages],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": request.contract.name,
                    "schema": request.contract.json_schema,
                    "strict": True,
                }
            },
        }
        if request.effort:
            kwargs["reasoning"] = {"effort": request.effort}
        if request.tools:
            kwargs["tools"] = [
                {
                    "type": "mcp",
                    "server_label": server.server_label,
                    "server_url": server.server_url,
                    "allowed_tools": server.allowed_tools,
                    "require_approval": "never",
                }
                for server in request.tools
            ]

        try:
            response = await self._client.responses.create(**kwargs)
        except openai.AuthenticationError as e:
            raise AuthenticationError("OpenAI rejected the API key", cause=e) from e
        except openai.RateLimitError as e:
            raise RateLimitError("OpenAI rate limit exceeded", cause=e) from e
        except openai.NotFoundError as e:
            raise ModelError(f"Model not available: {request.model}", cause=e) from e
        except openai.APIError as e:
            raise ProviderError(f"OpenAI request failed: {e}", cause=e) from e

        payload = response.model_dump()
        logger.debug(
            "openai_response_received",
            model=payload.get("model"),
            contract=request.contract.name,
            status=payload.get("status"),
        )
        return ModelResponse(
            text=response.output_text or "",
            model=payload.get("model") or request.model,
            tool_trace=collect_tool_invocations(payload),
            raw_response=payload,
        )

    def _to_input(self, message: ModelMessage) -> dict[str, Any]:
        if isinstance(message.content, str):
            return {"role": message.role, "content": message.content}
        parts: list[dict[str, Any]] = []
        for part in message.content:
            if isinstance(part, ImagePart):
                parts.append(
                    {"type": "input_image", "file_id": part.file_id, "detail": part.detail}
                )
            else:
                parts.append({"type": "input_text", "text": part.text})
        return {"role": message.role, "content": parts}


def collect_tool_invocations(node: Any) -> list[ToolInvocation]:
    """Walk a response payload and return every named tool node, in order."""
    found: list[ToolInvocation] = []
    _walk(node, found)
    return found


def _walk(node: Any, found: list[ToolInvocation]) -> None:
    if isinstance(node, list):
        for item in node:
            _walk(item, found)
        return
    if not isinstance(node, dict):
        return
    node_type = node.get("type")
    name = node.get("name") or node.get("tool_name")
    if node_type in TOOL_NODE_TYPES and isinstance(name, str) and name:
        found.append(ToolInvocation(name=name, type=node_type))
    for value in node.values():
        if isinstance(value, dict | list):
            _walk(value, found)
