"""Outfit rating from a photo."""

from typing import Any

from pydantic import BaseModel, Field

from atelier.context.models import TurnContext
from atelier.generators.replies import Reply, text_replies
from atelier.generators.vision import ImageAdviceGenerator
from atelier.observability.logging import get_logger
from atelier.styling.models import Upload, VibeCheckRecord

logger = get_logger(__name__)

# Category headings the prompt asks for, mapped to record fields
CATEGORY_FIELDS: dict[str, str] = {
    "Fit & Silhouette": "fit_silhouette",
    "Color Harmony": "color_harmony",
    "Styling Details": "styling_details",
    "Accessories & Texture": "accessories_texture",
    "Context & Confidence": "context_confidence",
}


class VibeCategory(BaseModel):
    heading: str = Field(..., description="Category name")
    score: float = Field(..., description="Score from 0 to 10")


class VibeCheckOutput(BaseModel):
    """Model output for a vibe check."""

    vibe_score: float | None = Field(..., description="Overall score from 0 to 10")
    vibe_reply: str = Field(..., description="One-line verdict")
    categories: list[VibeCategory] = Field(..., description="Per-category scores")
    reply_text: str = Field(..., description="Short explanation with one improvement")
    followup_text: str | None = Field(..., description="Optional follow-up question")


class VibeCheckGenerator(ImageAdviceGenerator[VibeCheckOutput]):
    """Rates an outfit photo and records a VibeCheckRecord."""

    name = "vibe_check"
    version = "2"
    prompt_key = "vibe_check"
    domain_schema = VibeCheckOutput
    upload_request = "Please upload a photo of your outfit for a quick vibe check."

    async def persist(self, context: TurnContext, value: VibeCheckOutput, prepared: Any) -> None:
        upload: Upload = prepared
        scores = {c.heading: c.score for c in value.categories}
        record = VibeCheckRecord(
            user_id=context.user.id,
            upload_id=upload.id,
            overall_score=value.vibe_score,
            comment=value.reply_text or value.vibe_reply,
            raw_payload=value.model_dump(mode="json"),
            **{field: scores.get(heading) for heading, field in CATEGORY_FIELDS.items()},
        )
        await self._deps.styling_store.create_vibe_check(record)

        user = context.user.model_copy(deep=True)
        user.last_vibe_check_at = self._deps.clock()
        await self._deps.user_store.save(user)
        logger.info(
            "vibe_check_recorded",
            record_id=str(record.id),
            overall_score=value.vibe_score,
        )

        if self._deps.wardrobe_indexer is not None and value.vibe_score is not None:
            await self._deps.wardrobe_indexer.index(
                context.user.id, upload, context.inbound.text
            )

    def format_reply(self, context: TurnContext, value: VibeCheckOutput) -> list[Reply]:
        return text_replies(format_scorecard(value), value.followup_text)


def format_scorecard(value: VibeCheckOutput) -> str:
    """Scores as a fixed-layout card, followed by the model's explanation."""
    lines = ["Vibe Check"]
    lines.extend(f"- {c.heading}: {_score(c.score)}" for c in value.categories)
    lines.append(f"- Overall: {_score(value.vibe_score)}")
    card = "\n".join(lines)
    return f"{card}\n\n{value.reply_text}" if value.reply_text else card


def _score(score: float | None) -> str:
    if score is None:
        return "N/A"
    return f"{score:g}"
