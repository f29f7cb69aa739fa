"""Seasonal color analysis from a portrait."""

from typing import Any

from pydantic import BaseModel, Field

from atelier.context.models import TurnContext
from atelier.generators.replies import Reply, text_replies
from atelier.generators.vision import ImageAdviceGenerator
from atelier.observability.logging import get_logger
from atelier.styling.enums import PaletteName, Undertone
from atelier.styling.models import ColorAnalysisRecord, ColorSwatch, Upload

logger = get_logger(__name__)


class ColorAnalysisOutput(BaseModel):
    """Model output for a color analysis."""

    reply_text: str = Field(..., description="Friendly explanation of the result")
    followup_text: str | None = Field(..., description="Optional next step")
    skin_tone: ColorSwatch | None = Field(..., description="Skin tone")
    eye_color: ColorSwatch | None = Field(..., description="Eye color")
    hair_color: ColorSwatch | None = Field(..., description="Hair color")
    undertone: Undertone | None = Field(..., description="Skin undertone")
    palette_name: PaletteName | None = Field(..., description="Twelve-season palette")
    palette_comment: str | None = Field(..., description="Why this palette fits")
    top3_colors: list[ColorSwatch] = Field(..., description="Most flattering colors")
    avoid3_colors: list[ColorSwatch] = Field(..., description="Colors to avoid")


class ColorAnalysisGenerator(ImageAdviceGenerator[ColorAnalysisOutput]):
    """Analyzes a portrait and records a ColorAnalysisRecord."""

    name = "color_analysis"
    version = "2"
    prompt_key = "color_analysis"
    domain_schema = ColorAnalysisOutput
    upload_request = (
        "Please upload a clear, well-lit portrait (face and hair visible) "
        "for color analysis."
    )

    async def persist(
        self, context: TurnContext, value: ColorAnalysisOutput, prepared: Any
    ) -> None:
        upload: Upload = prepared
        record = ColorAnalysisRecord(
            user_id=context.user.id,
            upload_id=upload.id,
            palette_name=value.palette_name,
            palette_comment=value.palette_comment,
            undertone=value.undertone,
            skin_tone=value.skin_tone.name if value.skin_tone else None,
            eye_color=value.eye_color.name if value.eye_color else None,
            hair_color=value.hair_color.name if value.hair_color else None,
            top3_colors=value.top3_colors,
            avoid3_colors=value.avoid3_colors,
            raw_payload=value.model_dump(mode="json"),
        )
        await self._deps.styling_store.create_color_analysis(record)

        user = context.user.model_copy(deep=True)
        user.last_color_analysis_at = self._deps.clock()
        await self._deps.user_store.save(user)
        logger.info(
            "color_analysis_recorded",
            record_id=str(record.id),
            palette=value.palette_name.value if value.palette_name else None,
        )

    def format_reply(self, context: TurnContext, value: ColorAnalysisOutput) -> list[Reply]:
        return text_replies(format_palette_card(value), value.followup_text)


def format_palette_card(value: ColorAnalysisOutput) -> str:
    """Palette summary built from the structured fields, then the explanation."""
    lines = [
        "Color Analysis",
        f"- Palette: {value.palette_name.value if value.palette_name else 'Undetermined'}",
        f"- Undertone: {value.undertone.value if value.undertone else 'Undetermined'}",
    ]
    if value.top3_colors:
        lines.append("- Best colors: " + ", ".join(c.name for c in value.top3_colors))
    if value.avoid3_colors:
        lines.append("- Colors to avoid: " + ", ".join(c.name for c in value.avoid3_colors))
    card = "\n".join(lines)
    return f"{card}\n\n{value.reply_text}" if value.reply_text else card
