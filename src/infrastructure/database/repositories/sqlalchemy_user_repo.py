"""SQLAlchemy implementation of the user directory."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.group import NO_GROUP
from domain.entities.user import User
from infrastructure.database.models import UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: int) -> User | None:
        """Get a user by ID."""
        stmt = select(UserModel).where(UserModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_many(self, ids: list[int]) -> list[User]:
        """Get users by ID, ordered by public ID. Unknown IDs are skipped."""
        if not ids:
            return []
        stmt = (
            select(UserModel)
            .where(UserModel.id.in_(ids))
            .order_by(UserModel.public_id, UserModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def set_group(self, user_id: int, group_id: int) -> None:
        """Write the user's current-group field."""
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"User {user_id} not found")

        model.group_id = group_id
        await self._session.flush()

    async def clear_group(self, group_id: int, user_ids: list[int] | None = None) -> list[int]:
        """Reset the current group of users pointing at ``group_id``."""
        conditions = [UserModel.group_id == group_id]
        if user_ids is not None:
            if not user_ids:
                return []
            conditions.append(UserModel.id.in_(user_ids))

        result = await self._session.execute(
            select(UserModel.id).where(*conditions).order_by(UserModel.id)
        )
        changed = list(result.scalars())
        if changed:
            await self._session.execute(
                update(UserModel)
                .where(UserModel.id.in_(changed))
                .values(group_id=NO_GROUP)
            )
        return changed

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            tenant_id=model.tenant_id,
            public_id=model.public_id,
            group_id=model.group_id,
        )
