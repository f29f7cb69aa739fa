"""In-memory implementation of StylingStore."""

from uuid import UUID

from atelier.errors import ConflictError, NotFoundError
from atelier.styling.models import (
    ColorAnalysisRecord,
    Upload,
    VibeCheckRecord,
    WardrobeItem,
)
from atelier.styling.store import StylingStore


class InMemoryStylingStore(StylingStore):
    """In-memory implementation of StylingStore for testing and development."""

    def __init__(self) -> None:
        self._uploads: dict[UUID, Upload] = {}
        self._color_analyses: dict[UUID, ColorAnalysisRecord] = {}
        self._vibe_checks: dict[UUID, VibeCheckRecord] = {}
        self._wardrobe: dict[UUID, WardrobeItem] = {}

    async def create_upload(self, upload: Upload) -> Upload:
        self._uploads[upload.id] = upload
        return upload

    async def get_upload(self, upload_id: UUID) -> Upload | None:
        return self._uploads.get(upload_id)

    async def create_color_analysis(
        self, record: ColorAnalysisRecord
    ) -> ColorAnalysisRecord:
        self._check_upload(record.upload_id)
        if any(r.upload_id == record.upload_id for r in self._color_analyses.values()):
            raise ConflictError(f"Upload already analyzed: {record.upload_id}")
        self._color_analyses[record.id] = record
        return record

    async def get_latest_color_analysis(
        self, user_id: UUID
    ) -> ColorAnalysisRecord | None:
        records = [r for r in self._color_analyses.values() if r.user_id == user_id]
        if not records:
            return None
        return max(records, key=lambda r: r.created_at)

    async def create_vibe_check(self, record: VibeCheckRecord) -> VibeCheckRecord:
        self._check_upload(record.upload_id)
        if any(r.upload_id == record.upload_id for r in self._vibe_checks.values()):
            raise ConflictError(f"Upload already rated: {record.upload_id}")
        self._vibe_checks[record.id] = record
        return record

    async def list_vibe_checks(self, user_id: UUID) -> list[VibeCheckRecord]:
        records = [r for r in self._vibe_checks.values() if r.user_id == user_id]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    async def add_wardrobe_item(self, item: WardrobeItem) -> WardrobeItem:
        self._wardrobe[item.id] = item
        return item

    async def list_wardrobe(self, user_id: UUID) -> list[WardrobeItem]:
        return [i for i in self._wardrobe.values() if i.user_id == user_id]

    def _check_upload(self, upload_id: UUID) -> None:
        if upload_id not in self._uploads:
            raise NotFoundError(f"Upload not found: {upload_id}")
