"""User directory protocol."""

from typing import Protocol

from domain.entities.user import User


class IUserRepository(Protocol):
    """Narrow view of the host's user directory."""

    async def get(self, id: int) -> User | None:
        """Get a user by ID."""
        ...

    async def get_many(self, ids: list[int]) -> list[User]:
        """Get users by ID, ordered by public ID. Unknown IDs are skipped."""
        ...

    async def set_group(self, user_id: int, group_id: int) -> None:
        """Write the user's current-group field."""
        ...

    async def clear_group(self, group_id: int, user_ids: list[int] | None = None) -> list[int]:
        """Reset the current group of users pointing at ``group_id``.

        Restricted to ``user_ids`` when given. Returns the users that changed.
        """
        ...
