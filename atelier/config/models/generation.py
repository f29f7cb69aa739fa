"""Model provider, tool and prompt configuration.

Each advice generator gets its own model id, effort hint and history depth
so that cheap intents can run on smaller models.
"""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr

Effort = Literal["minimal", "low", "medium", "high"]


class GeneratorModelConfig(BaseModel):
    """Model selection for one generator."""

    model: str = Field(default="gpt-5-mini", description="Model identifier")
    effort: Effort = Field(default="medium", description="Reasoning effort hint")
    history_limit: int = Field(
        default=12, ge=1, le=50, description="Conversation turns fed to the prompt"
    )
    use_tools: bool = Field(
        default=False, description="Attach the retrieval tool allow-list"
    )


class ModelsConfig(BaseModel):
    """Model provider configuration."""

    provider: Literal["openai", "mock"] = Field(
        default="openai",
        description="Model provider; mock returns canned payloads for local runs",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Provider API key (falls back to OPENAI_API_KEY)",
    )
    default_model: str = Field(default="gpt-5-mini", description="Fallback model")
    default_effort: Effort = Field(default="medium", description="Fallback effort")
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Deadline for a single provider call; None disables it",
    )
    generators: dict[str, GeneratorModelConfig] = Field(
        default_factory=dict,
        description="Per-generator overrides keyed by generator name",
    )

    def for_generator(self, name: str) -> GeneratorModelConfig:
        """Return the configuration for a generator, falling back to defaults.

        Fields an override leaves unset take default_model and default_effort.
        """
        config = self.generators.get(name)
        if config is None:
            return GeneratorModelConfig(
                model=self.default_model, effort=self.default_effort
            )
        fallback = {"model": self.default_model, "effort": self.default_effort}
        missing = {k: v for k, v in fallback.items() if k not in config.model_fields_set}
        return config.model_copy(update=missing) if missing else config


class ToolsConfig(BaseModel):
    """Remote retrieval tools exposed to the model."""

    enabled: bool = Field(default=False, description="Attach the MCP tool server")
    server_label: str = Field(
        default="atelier_mcp", description="Label the provider shows for the server"
    )
    server_url: str | None = Field(default=None, description="MCP server URL")
    allowed_tools: list[str] = Field(
        default_factory=lambda: [
            "getLatestColorAnalysis",
            "getRecentMessages",
            "getWardrobeItems",
        ],
        description="Tool names the model may call",
    )


class PromptsConfig(BaseModel):
    """Prompt template location."""

    directory: str | None = Field(
        default=None,
        description="Directory of <key>.txt templates; None uses the bundled set",
    )
