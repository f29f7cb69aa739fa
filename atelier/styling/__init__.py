"""Styling domain: uploads, analysis records and wardrobe."""

from atelier.styling.enums import PaletteName, Undertone, WardrobeCategory
from atelier.styling.models import (
    ColorAnalysisRecord,
    ColorSwatch,
    Upload,
    VibeCheckRecord,
    WardrobeItem,
)
from atelier.styling.store import StylingStore

__all__ = [
    "ColorAnalysisRecord",
    "ColorSwatch",
    "PaletteName",
    "StylingStore",
    "Undertone",
    "Upload",
    "VibeCheckRecord",
    "WardrobeCategory",
    "WardrobeItem",
]
