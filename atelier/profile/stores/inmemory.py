"""In-memory implementation of UserStore."""

from uuid import UUID

from atelier.errors import NotFoundError
from atelier.profile.models import User, utc_now
from atelier.profile.store import UserStore


class InMemoryUserStore(UserStore):
    """In-memory implementation of UserStore for testing and development.

    Records are copied on the way in and out so callers cannot mutate
    stored state without calling save().
    """

    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}
        self._by_external_id: dict[str, UUID] = {}

    async def get(self, user_id: UUID) -> User | None:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_by_external_id(self, external_id: str) -> User | None:
        user_id = self._by_external_id.get(external_id)
        if user_id is None:
            return None
        return await self.get(user_id)

    async def upsert_by_external_id(
        self,
        external_id: str,
        display_name: str | None,
    ) -> User:
        user_id = self._by_external_id.get(external_id)
        if user_id is None:
            user = User(external_id=external_id, display_name=display_name)
            self._users[user.id] = user
            self._by_external_id[external_id] = user.id
        else:
            user = self._users[user_id]
            if display_name is not None and display_name != user.display_name:
                user.display_name = display_name
                user.updated_at = utc_now()
        return user.model_copy(deep=True)

    async def save(self, user: User) -> User:
        if user.id not in self._users:
            raise NotFoundError(f"User not found: {user.id}")
        user.updated_at = utc_now()
        self._users[user.id] = user.model_copy(deep=True)
        return user
