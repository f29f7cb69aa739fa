"""Structured output invocation.

StructuredOutputInvoker turns a pydantic result model into a strict
generation contract, calls the injected ModelProvider once, and returns
the validated value. Tool usage reported by the provider travels beside
the value so callers never persist it by accident.

There are no retries. A payload that cannot be parsed raises
OutputFormatError; one that parses but breaks the model raises
OutputValidationError.
"""

import asyncio
import copy
import json
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from atelier.config.models.generation import ToolsConfig
from atelier.errors import OutputFormatError, OutputValidationError, UpstreamError
from atelier.observability.logging import get_logger
from atelier.observability.metrics import MODEL_INVOCATIONS, TOOL_CALLS
from atelier.providers.llm.base import (
    ModelMessage,
    ModelProvider,
    ModelRequest,
    ModelResponse,
    OutputContract,
    ToolInvocation,
    ToolServer,
)
from atelier.providers.llm.schema import strictify_schema

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class ToolUsage:
    """Tools the model called during one invocation, de-duplicated."""

    tool_names: tuple[str, ...] = ()

    @property
    def tool_call_count(self) -> int:
        return len(self.tool_names)

    @classmethod
    def from_trace(cls, trace: list[ToolInvocation]) -> "ToolUsage":
        return cls(tool_names=tuple(dict.fromkeys(call.name for call in trace)))


@dataclass(frozen=True)
class StructuredResult(Generic[T]):
    """A validated value plus its tool-usage side channel."""

    value: T
    tool_usage: ToolUsage = field(default_factory=ToolUsage)


@lru_cache(maxsize=64)
def _cached_contract(result_schema: type[BaseModel]) -> dict[str, Any]:
    return strictify_schema(result_schema.model_json_schema())


def contract_schema(result_schema: type[BaseModel]) -> dict[str, Any]:
    """Return the strict JSON schema for a result model."""
    return copy.deepcopy(_cached_contract(result_schema))


class StructuredOutputInvoker:
    """Runs one strict structured call against a ModelProvider."""

    def __init__(
        self,
        provider: ModelProvider,
        tools: ToolsConfig | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the invoker.

        Args:
            provider: Model provider capability
            tools: Remote retrieval tool configuration
            timeout_seconds: Deadline for each provider call; None waits forever
        """
        self._provider = provider
        self._tools = tools or ToolsConfig()
        self._timeout = timeout_seconds

    @property
    def tools_available(self) -> bool:
        return self._tools.enabled and bool(self._tools.server_url)

    async def invoke(
        self,
        messages: list[ModelMessage],
        result_schema: type[T],
        *,
        model: str,
        effort: str | None = None,
        use_tools: bool = False,
        contract_name: str = "structured_output",
    ) -> StructuredResult[T]:
        """Invoke the model and validate its output against result_schema.

        Raises:
            UpstreamError: If the provider fails or the deadline passes
            OutputFormatError: If the payload is not JSON
            OutputValidationError: If the payload does not fit result_schema
        """
        request = ModelRequest(
            model=model,
            messages=messages,
            contract=OutputContract(
                name=contract_name,
                json_schema=contract_schema(result_schema),
            ),
            tools=self._tool_servers() if use_tools else [],
            effort=effort,
        )

        start = time.perf_counter()
        try:
            response = await self._call(request)
            value = self._validate(self._parse(response), result_schema)
        except UpstreamError as e:
            self._record(model, "upstream_error", contract_name, start, error=str(e))
            raise
        except OutputFormatError as e:
            self._record(model, "format_error", contract_name, start, error=str(e))
            raise
        except OutputValidationError as e:
            self._record(
                model, "validation_error", contract_name, start, error_count=len(e.errors)
            )
            raise

        usage = ToolUsage.from_trace(response.tool_trace)
        for name in usage.tool_names:
            TOOL_CALLS.labels(tool=name).inc()
        self._record(
            model,
            "success",
            contract_name,
            start,
            tool_call_count=usage.tool_call_count,
            tool_names=list(usage.tool_names),
        )
        return StructuredResult(value=value, tool_usage=usage)

    async def _call(self, request: ModelRequest) -> ModelResponse:
        if self._timeout is None:
            return await self._provider.invoke(request)
        try:
            return await asyncio.wait_for(
                self._provider.invoke(request), timeout=self._timeout
            )
        except TimeoutError as e:
            raise UpstreamError(
                f"Model call exceeded {self._timeout}s deadline", cause=e
            ) from e

    def _parse(self, response: ModelResponse) -> Any:
        try:
            return json.loads(response.text)
        except (json.JSONDecodeError, TypeError) as e:
            raise OutputFormatError(
                "Failed to parse model output as JSON",
                raw_text=response.text,
                cause=e,
            ) from e

    def _validate(self, data: Any, result_schema: type[T]) -> T:
        try:
            return result_schema.model_validate(data)
        except PydanticValidationError as e:
            raise OutputValidationError(
                f"Model output does not match {result_schema.__name__}",
                errors=e.errors(include_url=False, include_context=False),
                cause=e,
            ) from e

    def _tool_servers(self) -> list[ToolServer]:
        if not self.tools_available:
            return []
        return [
            ToolServer(
                server_label=self._tools.server_label,
                server_url=self._tools.server_url or "",
                allowed_tools=list(self._tools.allowed_tools),
            )
        ]

    def _record(
        self,
        model: str,
        outcome: str,
        contract_name: str,
        start: float,
        **fields: Any,
    ) -> None:
        MODEL_INVOCATIONS.labels(model=model, outcome=outcome).inc()
        latency_ms = round((time.perf_counter() - start) * 1000, 1)
        log = logger.info if outcome == "success" else logger.warning
        log(
            "structured_output_invoked",
            contract=contract_name,
            model=model,
            outcome=outcome,
            latency_ms=latency_ms,
            **fields,
        )
