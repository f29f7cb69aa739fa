"""Profile domain: users and their demographic attributes."""

from atelier.profile.enums import AgeGroup, Gender, ProfileField
from atelier.profile.models import User
from atelier.profile.store import UserStore

__all__ = ["AgeGroup", "Gender", "ProfileField", "User", "UserStore"]
