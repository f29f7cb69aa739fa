"""Job configuration models.

Configuration for background job infrastructure.
"""

from pydantic import BaseModel, Field, SecretStr


class HatchetConfig(BaseModel):
    """Hatchet background job orchestration configuration.

    Hatchet carries the memory extraction job that runs after a
    conversation is rotated.
    """

    enabled: bool = Field(default=True, description="Enable Hatchet integration")
    server_url: str = Field(
        default="http://localhost:7077",
        description="Hatchet engine server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Hatchet API key (from HATCHET_API_KEY env var)",
    )
    worker_concurrency: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of concurrent job workers",
    )
    memory_extraction_event: str = Field(
        default="conversation:closed",
        description="Event key that triggers memory extraction",
    )


class JobsConfig(BaseModel):
    """Top-level jobs configuration."""

    hatchet: HatchetConfig = Field(
        default_factory=HatchetConfig,
        description="Hatchet configuration",
    )
