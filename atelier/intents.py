"""User intents the assistant can serve."""

from enum import Enum


class Intent(str, Enum):
    """What the user wants from a turn."""

    VIBE_CHECK = "vibe_check"
    COLOR_ANALYSIS = "color_analysis"
    PAIRING = "pairing"
    OCCASION = "occasion"
    VACATION = "vacation"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: str | None) -> "Intent | None":
        """Return the intent named by value, or None if it names none."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None
