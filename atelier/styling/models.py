"""Styling domain records.

Uploads, analysis records and wardrobe items are write-once: the
generators that create them never update or delete them.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from atelier.styling.enums import PaletteName, Undertone


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class ColorSwatch(BaseModel):
    """A named color with its hex code."""

    name: str = Field(..., description="Human-readable color name")
    hex: str = Field(
        ..., pattern=r"^#[0-9A-Fa-f]{6}$", description="Hex code (#RRGGBB)"
    )


class Upload(BaseModel):
    """An image submitted on one turn."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    user_id: UUID = Field(..., description="Owning user")
    image_path: str | None = Field(
        default=None, description="Externally stored image location"
    )
    file_id: str = Field(..., description="Model-usable file reference")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")


class ColorAnalysisRecord(BaseModel):
    """Result of a color analysis, one per upload."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    user_id: UUID = Field(..., description="Owning user")
    upload_id: UUID = Field(..., description="Analyzed upload")
    palette_name: PaletteName | None = Field(default=None, description="Seasonal palette")
    palette_comment: str | None = Field(default=None, description="Palette explanation")
    undertone: Undertone | None = Field(default=None, description="Skin undertone")
    skin_tone: str | None = Field(default=None, description="Skin tone name")
    eye_color: str | None = Field(default=None, description="Eye color name")
    hair_color: str | None = Field(default=None, description="Hair color name")
    top3_colors: list[ColorSwatch] = Field(
        default_factory=list, description="Most flattering colors"
    )
    avoid3_colors: list[ColorSwatch] = Field(
        default_factory=list, description="Colors to avoid"
    )
    raw_payload: dict[str, Any] = Field(
        default_factory=dict, description="Validated model output kept for audit"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")


class VibeCheckRecord(BaseModel):
    """Outfit rating, one per upload."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    user_id: UUID = Field(..., description="Owning user")
    upload_id: UUID = Field(..., description="Rated upload")
    fit_silhouette: float | None = Field(default=None, description="Fit score")
    color_harmony: float | None = Field(default=None, description="Color score")
    styling_details: float | None = Field(default=None, description="Details score")
    accessories_texture: float | None = Field(default=None, description="Accessories score")
    context_confidence: float | None = Field(default=None, description="Context score")
    overall_score: float | None = Field(default=None, description="Overall score")
    comment: str | None = Field(default=None, description="Short verdict")
    raw_payload: dict[str, Any] = Field(
        default_factory=dict, description="Validated model output kept for audit"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")


class WardrobeItem(BaseModel):
    """A clothing item the user owns."""

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    user_id: UUID = Field(..., description="Owning user")
    name: str = Field(..., description="Item name")
    category: str = Field(..., description="Broad category, e.g. top or footwear")
    type: str | None = Field(default=None, description="Item type, e.g. shirt")
    subtype: str | None = Field(default=None, description="Item subtype, e.g. oxford")
    colors: list[str] = Field(default_factory=list, description="Dominant colors")
    attributes: dict[str, Any] = Field(
        default_factory=dict, description="Free-form attributes (fabric, fit)"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
