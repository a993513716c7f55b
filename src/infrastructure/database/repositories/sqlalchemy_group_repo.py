"""SQLAlchemy implementation of Group repository."""

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.group import Group, GroupMembership
from infrastructure.database.models import GroupModel, GroupUserModel


class SQLAlchemyGroupRepository:
    """SQLAlchemy implementation of IGroupRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: int) -> Group | None:
        """Get a group by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_by_name(self, tenant_id: int, name: str) -> Group | None:
        """Get a group by exact (tenant, name) match."""
        stmt = (
            select(GroupModel)
            .where(GroupModel.tenant_id == tenant_id, GroupModel.name == name)
            .order_by(GroupModel.id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_tenant(
        self,
        tenant_id: int,
        offset: int = 0,
        limit: int = 0,
        search: str = "",
    ) -> list[Group]:
        """Get a page of a tenant's groups ordered by name. limit=0 means all."""
        stmt = self._filter(select(GroupModel), tenant_id, search).order_by(
            GroupModel.name, GroupModel.id
        )
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def count_for_tenant(self, tenant_id: int, search: str = "") -> int:
        """Count a tenant's groups matching the search."""
        stmt = self._filter(
            select(func.count()).select_from(GroupModel), tenant_id, search
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def get_default(self, tenant_id: int) -> Group | None:
        """Get the group flagged as the tenant's default."""
        stmt = (
            select(GroupModel)
            .where(GroupModel.tenant_id == tenant_id, GroupModel.is_default.is_(True))
            .order_by(GroupModel.name, GroupModel.id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, group: Group) -> Group:
        """Create a new group."""
        model = self._to_model(group)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, group: Group) -> Group:
        """Persist a group's name."""
        model = await self._get_model(group.id)

        if not model:
            raise ValueError(f"Group {group.id} not found")

        model.name = group.name

        await self._session.flush()
        return self._to_entity(model)

    async def set_default_flag(self, group_id: int, is_default: bool) -> None:
        """Persist a group's default flag."""
        model = await self._get_model(group_id)

        if not model:
            raise ValueError(f"Group {group_id} not found")

        model.is_default = is_default
        await self._session.flush()

    async def delete(self, id: int) -> bool:
        """Delete a group together with its memberships."""
        model = await self._get_model(id)

        if not model:
            return False

        await self._session.execute(
            delete(GroupUserModel).where(GroupUserModel.group_id == id)
        )
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def get_member(self, group_id: int, user_id: int) -> GroupMembership | None:
        """Get a specific membership."""
        stmt = select(GroupUserModel).where(
            GroupUserModel.group_id == group_id,
            GroupUserModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._member_to_entity(model) if model else None

    async def get_group_user_ids(self, group_id: int) -> list[int]:
        """Get the IDs of all members of a group."""
        stmt = (
            select(GroupUserModel.user_id)
            .where(GroupUserModel.group_id == group_id)
            .order_by(GroupUserModel.user_id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def get_groups_of_user(self, user_id: int) -> list[Group]:
        """Get all groups a user belongs to."""
        stmt = (
            select(GroupModel)
            .join(GroupUserModel, GroupUserModel.group_id == GroupModel.id)
            .where(GroupUserModel.user_id == user_id)
            .order_by(GroupModel.name, GroupModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_memberships_of_user(self, user_id: int) -> list[GroupMembership]:
        """Get all membership rows of a user."""
        stmt = (
            select(GroupUserModel)
            .where(GroupUserModel.user_id == user_id)
            .order_by(GroupUserModel.group_id)
        )
        result = await self._session.execute(stmt)
        return [self._member_to_entity(model) for model in result.scalars()]

    async def add_member(self, membership: GroupMembership) -> GroupMembership:
        """Insert a membership row."""
        model = self._member_to_model(membership)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._member_to_entity(model)

    async def remove_members(self, group_id: int, user_ids: list[int]) -> list[int]:
        """Delete memberships of the given users; return the removed user IDs."""
        if not user_ids:
            return []
        condition = (
            GroupUserModel.group_id == group_id,
            GroupUserModel.user_id.in_(user_ids),
        )
        result = await self._session.execute(
            select(GroupUserModel.user_id).where(*condition).order_by(GroupUserModel.user_id)
        )
        removed = list(result.scalars())
        if removed:
            await self._session.execute(delete(GroupUserModel).where(*condition))
        return removed

    async def remove_user_memberships(self, user_id: int) -> int:
        """Delete every membership of a user; return the number removed."""
        stmt = delete(GroupUserModel).where(GroupUserModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def _get_model(self, id: int) -> GroupModel | None:
        stmt = select(GroupModel).where(GroupModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _filter(stmt: Select, tenant_id: int, search: str) -> Select:
        """Apply the tenant and case-insensitive name substring filters."""
        stmt = stmt.where(GroupModel.tenant_id == tenant_id)
        if search:
            stmt = stmt.where(GroupModel.name.icontains(search, autoescape=True))
        return stmt

    def _to_entity(self, model: GroupModel) -> Group:
        """Convert ORM model to domain entity."""
        return Group(
            id=model.id,
            tenant_id=model.tenant_id,
            name=model.name,
            is_default=model.is_default,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Group) -> GroupModel:
        """Convert domain entity to ORM model. The store assigns the ID."""
        return GroupModel(
            tenant_id=entity.tenant_id,
            name=entity.name,
            is_default=entity.is_default,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _member_to_entity(self, model: GroupUserModel) -> GroupMembership:
        """Convert membership ORM model to domain entity."""
        return GroupMembership(
            group_id=model.group_id,
            user_id=model.user_id,
            created_at=model.created_at,
        )

    def _member_to_model(self, entity: GroupMembership) -> GroupUserModel:
        """Convert membership domain entity to ORM model."""
        return GroupUserModel(
            group_id=entity.group_id,
            user_id=entity.user_id,
            created_at=entity.created_at,
        )
