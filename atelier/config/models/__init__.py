"""Configuration section models."""

from atelier.config.models.api import APIConfig
from atelier.config.models.generation import (
    GeneratorModelConfig,
    ModelsConfig,
    PromptsConfig,
    ToolsConfig,
)
from atelier.config.models.jobs import HatchetConfig, JobsConfig
from atelier.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from atelier.config.models.session import LockingConfig, SessionConfig

__all__ = [
    "APIConfig",
    "GeneratorModelConfig",
    "HatchetConfig",
    "JobsConfig",
    "LockingConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ModelsConfig",
    "ObservabilityConfig",
    "PromptsConfig",
    "SessionConfig",
    "ToolsConfig",
]
