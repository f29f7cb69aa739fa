"""Hatchet client wrapper.

Lazily builds the Hatchet SDK client and degrades to "unavailable" when
Hatchet is disabled or cannot be reached, so job producers keep working.
"""

from typing import Any

from hatchet_sdk import ClientConfig, Hatchet

from atelier.config.models.jobs import HatchetConfig
from atelier.observability.logging import get_logger

logger = get_logger(__name__)


class HatchetClient:
    """Wrapper for the Hatchet SDK client."""

    def __init__(self, config: HatchetConfig) -> None:
        self._config = config
        self._client: Any | None = None
        self._available: bool | None = None

    def _get_or_create_client(self) -> Any | None:
        if self._client is not None:
            return self._client

        if not self._config.enabled:
            logger.info("hatchet_disabled", reason="config")
            self._available = False
            return None

        try:
            options: dict[str, Any] = {"server_url": self._config.server_url}
            if self._config.api_key:
                options["token"] = self._config.api_key.get_secret_value()
            self._client = Hatchet(config=ClientConfig(**options))
        except Exception as e:
            logger.error("hatchet_client_init_failed", error=str(e))
            self._available = False
            return None

        self._available = True
        logger.info("hatchet_client_initialized", server_url=self._config.server_url)
        return self._client

    def get_client(self) -> Any | None:
        """Get the Hatchet client, or None if unavailable."""
        return self._get_or_create_client()

    @property
    def is_available(self) -> bool:
        """Whether the last initialization attempt succeeded."""
        return bool(self._available)

    @property
    def config(self) -> HatchetConfig:
        return self._config
