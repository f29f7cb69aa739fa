"""UserStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from atelier.profile.models import User


class UserStore(ABC):
    """Abstract interface for user storage."""

    @abstractmethod
    async def get(self, user_id: UUID) -> User | None:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> User | None:
        """Get a user by messaging channel identity."""
        pass

    @abstractmethod
    async def upsert_by_external_id(
        self,
        external_id: str,
        display_name: str | None,
    ) -> User:
        """Create the user or merge the display name into the existing one.

        A None display name leaves the stored name untouched.
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Persist changes to an existing user."""
        pass
