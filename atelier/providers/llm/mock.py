"""Mock model provider for testing."""

import json
from typing import Any

from atelier.providers.llm.base import (
    ModelProvider,
    ModelRequest,
    ModelResponse,
    ToolInvocation,
)

Payload = str | dict[str, Any] | Exception


class MockModelProvider(ModelProvider):
    """Mock model provider for testing.

    Responses are keyed by contract name. A sticky response answers every
    call for its contract; queued responses are consumed first, one per
    call. A dict payload is serialized to JSON, a string is returned
    verbatim and an exception instance is raised.
    """

    def __init__(
        self,
        default_response: Payload = "{}",
        default_model: str = "mock-model",
        responses: dict[str, Payload] | None = None,
    ):
        self._default_response = default_response
        self._default_model = default_model
        self._responses: dict[str, Payload] = dict(responses or {})
        self._queued: dict[str, list[Payload]] = {}
        self._tool_traces: dict[str, list[str]] = {}
        self._call_history: list[ModelRequest] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def call_history(self) -> list[ModelRequest]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def calls_for(self, contract_name: str) -> list[ModelRequest]:
        """Return recorded calls for one contract."""
        return [r for r in self._call_history if r.contract.name == contract_name]

    def clear_history(self) -> None:
        self._call_history.clear()

    def set_response(self, contract_name: str, payload: Payload) -> None:
        """Answer every call for a contract with payload."""
        self._responses[contract_name] = payload

    def queue_response(self, contract_name: str, payload: Payload) -> None:
        """Answer the next call for a contract with payload."""
        self._queued.setdefault(contract_name, []).append(payload)

    def set_tool_trace(self, contract_name: str, tool_names: list[str]) -> None:
        """Report these tool calls for a contract."""
        self._tool_traces[contract_name] = tool_names

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        self._call_history.append(request)
        name = request.contract.name

        queue = self._queued.get(name)
        if queue:
            payload = queue.pop(0)
        else:
            payload = self._responses.get(name, self._default_response)

        if isinstance(payload, Exception):
            raise payload
        text = payload if isinstance(payload, str) else json.dumps(payload)

        return ModelResponse(
            text=text,
            model=request.model or self._default_model,
            tool_trace=[
                ToolInvocation(name=tool) for tool in self._tool_traces.get(name, [])
            ],
        )
