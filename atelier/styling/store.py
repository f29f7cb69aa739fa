"""StylingStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from atelier.styling.models import (
    ColorAnalysisRecord,
    Upload,
    VibeCheckRecord,
    WardrobeItem,
)


class StylingStore(ABC):
    """Abstract interface for uploads, analysis records and wardrobe items.

    Records are create-only. Each analysis record is one-to-one with
    its upload.
    """

    @abstractmethod
    async def create_upload(self, upload: Upload) -> Upload:
        """Persist an upload."""
        pass

    @abstractmethod
    async def get_upload(self, upload_id: UUID) -> Upload | None:
        """Get an upload by ID."""
        pass

    @abstractmethod
    async def create_color_analysis(
        self, record: ColorAnalysisRecord
    ) -> ColorAnalysisRecord:
        """Persist a color analysis.

        Raises:
            ConflictError: If the upload already has a color analysis
        """
        pass

    @abstractmethod
    async def get_latest_color_analysis(
        self, user_id: UUID
    ) -> ColorAnalysisRecord | None:
        """Get the user's most recent color analysis."""
        pass

    @abstractmethod
    async def create_vibe_check(self, record: VibeCheckRecord) -> VibeCheckRecord:
        """Persist a vibe check.

        Raises:
            ConflictError: If the upload already has a vibe check
        """
        pass

    @abstractmethod
    async def list_vibe_checks(self, user_id: UUID) -> list[VibeCheckRecord]:
        """List a user's vibe checks, newest first."""
        pass

    @abstractmethod
    async def add_wardrobe_item(self, item: WardrobeItem) -> WardrobeItem:
        """Persist a wardrobe item."""
        pass

    @abstractmethod
    async def list_wardrobe(self, user_id: UUID) -> list[WardrobeItem]:
        """Return the user's full wardrobe."""
        pass
