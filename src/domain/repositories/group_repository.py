"""Group repository protocol."""

from typing import Protocol

from domain.entities.group import Group, GroupMembership


class IGroupRepository(Protocol):
    """Repository interface for Group and GroupMembership records.

    Uniqueness is never enforced here; callers query before inserting.
    """

    async def get(self, id: int) -> Group | None:
        """Get a group by ID."""
        ...

    async def get_by_name(self, tenant_id: int, name: str) -> Group | None:
        """Get a group by exact (tenant, name) match."""
        ...

    async def get_for_tenant(
        self,
        tenant_id: int,
        offset: int = 0,
        limit: int = 0,
        search: str = "",
    ) -> list[Group]:
        """Get a page of a tenant's groups ordered by name. limit=0 means all."""
        ...

    async def count_for_tenant(self, tenant_id: int, search: str = "") -> int:
        """Count a tenant's groups matching the search."""
        ...

    async def get_default(self, tenant_id: int) -> Group | None:
        """Get the group flagged as the tenant's default."""
        ...

    async def create(self, group: Group) -> Group:
        """Create a new group."""
        ...

    async def update(self, group: Group) -> Group:
        """Persist a group's name."""
        ...

    async def set_default_flag(self, group_id: int, is_default: bool) -> None:
        """Persist a group's default flag."""
        ...

    async def delete(self, id: int) -> bool:
        """Delete a group and its memberships."""
        ...

    async def get_member(self, group_id: int, user_id: int) -> GroupMembership | None:
        """Get a specific membership."""
        ...

    async def get_group_user_ids(self, group_id: int) -> list[int]:
        """Get the IDs of all members of a group."""
        ...

    async def get_groups_of_user(self, user_id: int) -> list[Group]:
        """Get all groups a user belongs to."""
        ...

    async def get_memberships_of_user(self, user_id: int) -> list[GroupMembership]:
        """Get all membership rows of a user."""
        ...

    async def add_member(self, membership: GroupMembership) -> GroupMembership:
        """Insert a membership row."""
        ...

    async def remove_members(self, group_id: int, user_ids: list[int]) -> list[int]:
        """Delete memberships of the given users; return the removed user IDs."""
        ...

    async def remove_user_memberships(self, user_id: int) -> int:
        """Delete every membership of a user; return the number removed."""
        ...
