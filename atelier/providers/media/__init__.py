"""Vision file stores."""

from atelier.providers.media.base import VisionFileStore
from atelier.providers.media.mock import MockVisionFileStore

__all__ = ["MockVisionFileStore", "VisionFileStore"]
