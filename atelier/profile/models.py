"""User profile models."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from atelier.profile.enums import AgeGroup, Gender, ProfileField


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class User(BaseModel):
    """A person talking to the assistant.

    Demographic attributes come in confirmed/inferred pairs. A confirmed
    value was stated by the user and is never replaced by an inference.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    external_id: str = Field(..., min_length=1, description="Messaging channel identity")
    display_name: str | None = Field(default=None, description="Name shown on the channel")
    confirmed_gender: Gender | None = Field(default=None, description="Stated gender")
    inferred_gender: Gender | None = Field(default=None, description="Guessed gender")
    confirmed_age_group: AgeGroup | None = Field(
        default=None, description="Stated age group"
    )
    inferred_age_group: AgeGroup | None = Field(
        default=None, description="Guessed age group"
    )
    last_color_analysis_at: datetime | None = Field(
        default=None, description="When the latest color analysis was derived"
    )
    last_vibe_check_at: datetime | None = Field(
        default=None, description="When the latest vibe check was derived"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update")

    @property
    def gender(self) -> Gender | None:
        """Best known gender, preferring the confirmed value."""
        return self.confirmed_gender or self.inferred_gender

    @property
    def age_group(self) -> AgeGroup | None:
        """Best known age group, preferring the confirmed value."""
        return self.confirmed_age_group or self.inferred_age_group

    def missing_fields(self, required: frozenset[ProfileField]) -> frozenset[ProfileField]:
        """Return the required fields this user has no value for."""
        known = {
            ProfileField.GENDER: self.gender,
            ProfileField.AGE_GROUP: self.age_group,
        }
        return frozenset(field for field in required if known[field] is None)
