"""Tests for InMemoryStylingStore."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from atelier.errors import ConflictError, NotFoundError
from atelier.styling.enums import PaletteName
from atelier.styling.models import ColorAnalysisRecord, Upload, VibeCheckRecord, WardrobeItem
from atelier.styling.stores.inmemory import InMemoryStylingStore


@pytest.fixture
def store() -> InMemoryStylingStore:
    return InMemoryStylingStore()


class TestInMemoryStylingStore:
    """Tests for InMemoryStylingStore."""

    @pytest.mark.asyncio
    async def test_upload_roundtrip(self, store: InMemoryStylingStore) -> None:
        """Should return a stored upload by id."""
        upload = await store.create_upload(Upload(user_id=uuid4(), file_id="file-1"))

        assert await store.get_upload(upload.id) == upload
        assert await store.get_upload(uuid4()) is None

    @pytest.mark.asyncio
    async def test_analysis_requires_upload(self, store: InMemoryStylingStore) -> None:
        """Should refuse records for unknown uploads."""
        with pytest.raises(NotFoundError):
            await store.create_color_analysis(ColorAnalysisRecord(user_id=uuid4(), upload_id=uuid4()))
        with pytest.raises(NotFoundError):
            await store.create_vibe_check(VibeCheckRecord(user_id=uuid4(), upload_id=uuid4()))

    @pytest.mark.asyncio
    async def test_one_record_per_upload(self, store: InMemoryStylingStore) -> None:
        """Should reject a second record of the same kind for one upload."""
        user_id = uuid4()
        upload = await store.create_upload(Upload(user_id=user_id, file_id="file-1"))
        await store.create_vibe_check(VibeCheckRecord(user_id=user_id, upload_id=upload.id))
        await store.create_color_analysis(ColorAnalysisRecord(user_id=user_id, upload_id=upload.id))

        with pytest.raises(ConflictError):
            await store.create_vibe_check(VibeCheckRecord(user_id=user_id, upload_id=upload.id))
        with pytest.raises(ConflictError):
            await store.create_color_analysis(
                ColorAnalysisRecord(user_id=user_id, upload_id=upload.id)
            )

    @pytest.mark.asyncio
    async def test_latest_color_analysis(self, store: InMemoryStylingStore) -> None:
        """Should return the newest analysis for the user only."""
        user_id = uuid4()
        base = datetime(2024, 5, 1, tzinfo=UTC)
        history = [
            (0, PaletteName.TRUE_WINTER),
            (2, PaletteName.SOFT_AUTUMN),
            (1, PaletteName.LIGHT_SPRING),
        ]
        for offset, palette in history:
            upload = await store.create_upload(Upload(user_id=user_id, file_id=f"file-{offset}"))
            await store.create_color_analysis(
                ColorAnalysisRecord(
                    user_id=user_id,
                    upload_id=upload.id,
                    palette_name=palette,
                    created_at=base + timedelta(days=offset),
                )
            )

        latest = await store.get_latest_color_analysis(user_id)

        assert latest.palette_name == PaletteName.SOFT_AUTUMN
        assert await store.get_latest_color_analysis(uuid4()) is None

    @pytest.mark.asyncio
    async def test_wardrobe_per_user(self, store: InMemoryStylingStore) -> None:
        """Should list only the owner's wardrobe items."""
        user_id = uuid4()
        await store.add_wardrobe_item(WardrobeItem(user_id=user_id, name="Oxford shirt", category="top"))
        await store.add_wardrobe_item(WardrobeItem(user_id=uuid4(), name="Loafers", category="footwear"))

        items = await store.list_wardrobe(user_id)

        assert [i.name for i in items] == ["Oxford shirt"]
