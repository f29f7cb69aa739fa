"""Wardrobe indexing.

After an outfit photo is rated, the same image is read once more for the
clothing it shows. New pieces become WardrobeItems, so later advice can
refer to what the user owns. Indexing is best effort: a failure is logged
and never reaches the turn that triggered it.
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from atelier.config.models.generation import GeneratorModelConfig
from atelier.errors import TURN_FAILURES
from atelier.observability.logging import get_logger
from atelier.observability.metrics import WARDROBE_ITEMS_INDEXED
from atelier.prompts.repository import PromptRepository
from atelier.providers.llm.base import ModelMessage
from atelier.providers.llm.structured import StructuredOutputInvoker
from atelier.styling.enums import WardrobeCategory
from atelier.styling.models import Upload, WardrobeItem
from atelier.styling.store import StylingStore

logger = get_logger(__name__)

PROMPT_KEY = "wardrobe_index"


class IndexedItemAttributes(BaseModel):
    style: str | None = Field(..., description="Style, e.g. casual")
    pattern: str | None = Field(..., description="Pattern, e.g. striped")
    color_primary: str = Field(..., description="Dominant color")
    color_secondary: str | None = Field(..., description="Second color")
    material: str | None = Field(..., description="Material, e.g. denim")
    fit: str | None = Field(..., description="Fit, e.g. slim")
    length: str | None = Field(..., description="Length, e.g. cropped")
    details: str | None = Field(..., description="Notable details")


class IndexedItem(BaseModel):
    category: WardrobeCategory = Field(..., description="Broad category")
    type: str = Field(..., description="Item type, e.g. blazer")
    subtype: str | None = Field(..., description="Item subtype, e.g. double-breasted")
    attributes: IndexedItemAttributes


class WardrobeIndexOutput(BaseModel):
    """Model output for wardrobe indexing."""

    status: Literal["ok", "bad_photo"] = Field(
        ..., description="bad_photo when no clothing is visible"
    )
    items: list[IndexedItem] = Field(..., description="Visible clothing items")


def item_key(name: str, category: str) -> tuple[str, str]:
    """Identity used to skip items the user already has."""
    return name.strip().lower(), category


def to_wardrobe_item(user_id: UUID, item: IndexedItem) -> WardrobeItem:
    attributes = item.attributes
    colors = [c for c in (attributes.color_primary, attributes.color_secondary) if c]
    return WardrobeItem(
        user_id=user_id,
        name=item.type.strip(),
        category=item.category.value,
        type=item.type.strip(),
        subtype=item.subtype,
        colors=colors,
        attributes=attributes.model_dump(
            exclude={"color_primary", "color_secondary"}, exclude_none=True
        ),
    )


class WardrobeIndexer:
    """Records the clothing visible in an uploaded photo."""

    def __init__(
        self,
        invoker: StructuredOutputInvoker,
        styling_store: StylingStore,
        prompts: PromptRepository,
        model_config: GeneratorModelConfig,
    ) -> None:
        self._invoker = invoker
        self._styling = styling_store
        self._prompts = prompts
        self._model = model_config

    async def index(self, user_id: UUID, upload: Upload, text: str | None = None) -> int:
        """Add new items from the photo to the user's wardrobe.

        Returns:
            Number of items added
        """
        try:
            result = await self._invoker.invoke(
                [
                    ModelMessage.system(self._prompts.get(PROMPT_KEY)),
                    ModelMessage.image(upload.file_id, text=text or None),
                ],
                WardrobeIndexOutput,
                model=self._model.model,
                effort=self._model.effort,
                contract_name=PROMPT_KEY,
            )
            output = result.value
            if output.status == "bad_photo":
                logger.info("wardrobe_index_bad_photo", upload_id=str(upload.id))
                return 0

            seen = {
                item_key(item.name, item.category)
                for item in await self._styling.list_wardrobe(user_id)
            }
            added = 0
            for indexed in output.items:
                if not indexed.type.strip():
                    continue
                item = to_wardrobe_item(user_id, indexed)
                key = item_key(item.name, item.category)
                if key in seen:
                    continue
                await self._styling.add_wardrobe_item(item)
                seen.add(key)
                added += 1
        except TURN_FAILURES as e:
            logger.warning(
                "wardrobe_index_failed",
                upload_id=str(upload.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            return 0

        WARDROBE_ITEMS_INDEXED.inc(added)
        logger.info(
            "wardrobe_indexed",
            upload_id=str(upload.id),
            items_seen=len(output.items),
            items_added=added,
        )
        return added
