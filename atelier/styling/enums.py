"""Enums for styling analyses."""

from enum import Enum


class Undertone(str, Enum):
    """Skin undertone."""

    WARM = "Warm"
    COOL = "Cool"
    NEUTRAL = "Neutral"


class PaletteName(str, Enum):
    """Twelve-season color palettes."""

    LIGHT_SPRING = "Light Spring"
    TRUE_SPRING = "True Spring"
    BRIGHT_SPRING = "Bright Spring"
    LIGHT_SUMMER = "Light Summer"
    TRUE_SUMMER = "True Summer"
    SOFT_SUMMER = "Soft Summer"
    SOFT_AUTUMN = "Soft Autumn"
    TRUE_AUTUMN = "True Autumn"
    DARK_AUTUMN = "Dark Autumn"
    BRIGHT_WINTER = "Bright Winter"
    TRUE_WINTER = "True Winter"
    DARK_WINTER = "Dark Winter"


class WardrobeCategory(str, Enum):
    """Broad wardrobe item category."""

    TOP = "top"
    BOTTOM = "bottom"
    OUTERWEAR = "outerwear"
    SHOES = "shoes"
    ACCESSORY = "accessory"
