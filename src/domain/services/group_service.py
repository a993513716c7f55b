"""Group service layer with business logic.

Owns the cross-record rules of the groups module:

- group names are unique within a tenant (custom groups, tenant 0, excepted)
- every tenant that has groups has exactly one default group
- the default group cannot be deleted; deleting any other group removes its
  memberships and its members are then moved to the default group
- a user's current group (``User.group_id``) is 0 or a group the user is a
  member of
- users only join groups of their own tenant or custom groups
"""

from typing import Callable, Iterable

import structlog

from core.exceptions import (
    CannotDeleteDefaultGroupError,
    GroupAlreadyExistsError,
    GroupNotFoundError,
    InvalidInputParameterError,
    TenantMismatchError,
    UserNotFoundError,
)
from domain.entities.group import NO_GROUP, NO_TENANT, Group, GroupMembership
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class GroupService:
    """Service layer for tenant user groups."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    # --- Groups ---

    async def create_group(self, tenant_id: int, name: str) -> Group:
        """Create a group. Names must be unique within a non-zero tenant."""
        _require_tenant_id(tenant_id, allow_custom=True)
        name = _require_name(name)

        async with self._uow_factory() as uow:
            if tenant_id != NO_TENANT:
                existing = await uow.groups.get_by_name(tenant_id, name)
                if existing:
                    raise GroupAlreadyExistsError(tenant_id, name)

            created = await uow.groups.create(Group(tenant_id=tenant_id, name=name))

            default = await self._ensure_default(uow, tenant_id)
            if default and default.id == created.id:
                created.is_default = True

            await uow.commit()

        logger.info(
            "group_created",
            group_id=created.id,
            tenant_id=tenant_id,
            is_default=created.is_default,
        )
        return created

    async def update_group(self, group_id: int, name: str) -> Group:
        """Rename a group, keeping names unique within its tenant."""
        _require_id(group_id, "group_id")
        name = _require_name(name)

        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if group.name == name:
                return group

            if not group.is_custom:
                existing = await uow.groups.get_by_name(group.tenant_id, name)
                if existing and existing.id != group.id:
                    raise GroupAlreadyExistsError(group.tenant_id, name)

            group.name = name
            updated = await uow.groups.update(group)
            await uow.commit()
            return updated

    async def get_group(self, group_id: int) -> Group:
        """Get a group by ID."""
        _require_id(group_id, "group_id")

        async with self._uow_factory() as uow:
            return await self._get_group(uow, group_id)

    async def get_groups(
        self,
        tenant_id: int,
        offset: int = 0,
        limit: int = 0,
        search: str = "",
    ) -> tuple[int, list[Group]]:
        """Get a page of a tenant's groups and the total match count.

        Default promotion runs against the whole tenant before the page is
        read, so paging never flags a second default.
        """
        _require_tenant_id(tenant_id, allow_custom=True)
        if offset < 0:
            raise InvalidInputParameterError("offset")
        if limit < 0:
            raise InvalidInputParameterError("limit")

        async with self._uow_factory() as uow:
            await self._ensure_default(uow, tenant_id)

            count = await uow.groups.count_for_tenant(tenant_id, search)
            items = await uow.groups.get_for_tenant(tenant_id, offset, limit, search)

            await uow.commit()
            return count, items

    # --- Default group ---

    async def get_default_group(self, tenant_id: int) -> Group | None:
        """Get the tenant's default group, promoting one if none is flagged."""
        _require_tenant_id(tenant_id, allow_custom=True)
        if tenant_id == NO_TENANT:
            return None

        async with self._uow_factory() as uow:
            default = await self._ensure_default(uow, tenant_id)
            await uow.commit()
            return default

    async def change_default_group(self, tenant_id: int, group_id: int) -> bool:
        """Make ``group_id`` the tenant's only default group.

        Only rows whose flag actually changes are written.
        """
        _require_tenant_id(tenant_id)
        _require_id(group_id, "group_id")

        async with self._uow_factory() as uow:
            groups = await uow.groups.get_for_tenant(tenant_id)
            if not any(group.id == group_id for group in groups):
                raise GroupNotFoundError(group_id)

            changed = 0
            for group in groups:
                should_be_default = group.id == group_id
                if group.is_default != should_be_default:
                    await uow.groups.set_default_flag(group.id, should_be_default)
                    changed += 1

            if changed:
                await uow.commit()
                logger.info(
                    "default_group_changed",
                    tenant_id=tenant_id,
                    group_id=group_id,
                    rows_changed=changed,
                )
            return True

    # --- Deletion ---

    async def delete_group(self, group_id: int) -> list[int]:
        """Delete a non-default group.

        Returns the users that lost their membership or current group. Moving
        them to the default group is a separate step
        (see ``reassign_to_default_group``).
        """
        _require_id(group_id, "group_id")

        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            if group.is_default:
                raise CannotDeleteDefaultGroupError(group_id)

            affected = await self._delete(uow, group)
            await uow.commit()
            return affected

    async def delete_groups(self, tenant_id: int, group_ids: list[int]) -> list[int]:
        """Delete several groups of a tenant and move their users to the default group.

        The deletion is all-or-nothing; the reassignment follows in its own
        transaction. Returns the distinct affected user IDs.
        """
        _require_tenant_id(tenant_id, allow_custom=True)
        if not group_ids:
            raise InvalidInputParameterError("group_ids")
        for group_id in group_ids:
            _require_id(group_id, "group_ids")

        affected: set[int] = set()
        async with self._uow_factory() as uow:
            for group_id in _unique(group_ids):
                group = await self._get_group(uow, group_id)
                if group.tenant_id != tenant_id:
                    raise GroupNotFoundError(group_id)
                if group.is_default:
                    raise CannotDeleteDefaultGroupError(group_id)
                affected.update(await self._delete(uow, group))
            await uow.commit()

        user_ids = sorted(affected)
        if user_ids and tenant_id != NO_TENANT:
            await self.reassign_to_default_group(tenant_id, user_ids)
        return user_ids

    async def delete_tenant_groups(self, tenant_id: int) -> int:
        """Delete every group of a tenant, default included."""
        _require_tenant_id(tenant_id)

        async with self._uow_factory() as uow:
            groups = await uow.groups.get_for_tenant(tenant_id)
            for group in groups:
                await self._delete(uow, group)
            await uow.commit()

        return len(groups)

    async def reassign_to_default_group(self, tenant_id: int, user_ids: list[int]) -> list[int]:
        """Add users to the tenant's default group.

        Users that no longer exist or belong to another tenant are skipped.
        Returns the users that were added.
        """
        _require_tenant_id(tenant_id)

        async with self._uow_factory() as uow:
            default = await self._ensure_default(uow, tenant_id)
            if not default:
                return []

            reassigned = []
            for user_id in _unique(user_ids):
                user = await uow.users.get(user_id)
                if not user:
                    logger.warning("reassign_user_missing", user_id=user_id, tenant_id=tenant_id)
                    continue
                if user.tenant_id != tenant_id:
                    logger.warning(
                        "reassign_user_tenant_mismatch",
                        user_id=user_id,
                        tenant_id=tenant_id,
                        user_tenant_id=user.tenant_id,
                    )
                    continue
                await self._add_member(uow, default.id, user)
                reassigned.append(user_id)

            await uow.commit()

        logger.info(
            "users_reassigned_to_default_group",
            tenant_id=tenant_id,
            group_id=default.id,
            user_count=len(reassigned),
        )
        return reassigned

    # --- Membership ---

    async def get_group_users(self, group_id: int) -> list[User]:
        """Get the members of a group, ordered by public ID."""
        _require_id(group_id, "group_id")

        async with self._uow_factory() as uow:
            await self._get_group(uow, group_id)
            user_ids = await uow.groups.get_group_user_ids(group_id)
            return await uow.users.get_many(user_ids)

    async def add_to_group(self, group_id: int, user_ids: list[int]) -> bool:
        """Add users to a group. Users already in the group are left alone."""
        _require_id(group_id, "group_id")
        if not user_ids:
            raise InvalidInputParameterError("user_ids")

        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            users = [await self._get_user(uow, user_id) for user_id in _unique(user_ids)]
            for user in users:
                _require_same_tenant(group, user)

            for user in users:
                await self._add_member(uow, group_id, user)

            await uow.commit()
            return True

    async def remove_users_from_group(self, group_id: int, user_ids: list[int]) -> bool:
        """Remove users from a group and clear it as their current group."""
        _require_id(group_id, "group_id")
        if not user_ids:
            raise InvalidInputParameterError("user_ids")

        async with self._uow_factory() as uow:
            await self._get_group(uow, group_id)

            user_ids = list(_unique(user_ids))
            removed = await uow.groups.remove_members(group_id, user_ids)
            await uow.users.clear_group(group_id, user_ids)

            await uow.commit()

        logger.info("users_removed_from_group", group_id=group_id, user_count=len(removed))
        return True

    async def save_groups_of_user(self, user_id: int, group_ids: list[int]) -> bool:
        """Make ``group_ids`` exactly the set of groups the user belongs to.

        Memberships already present are kept as they are; only the difference
        is written.
        """
        _require_id(user_id, "user_id")
        for group_id in group_ids:
            _require_id(group_id, "group_ids")

        async with self._uow_factory() as uow:
            user = await self._get_user(uow, user_id)

            wanted = list(_unique(group_ids))
            for group_id in wanted:
                _require_same_tenant(await self._get_group(uow, group_id), user)

            current = {m.group_id for m in await uow.groups.get_memberships_of_user(user_id)}

            for group_id in sorted(current.difference(wanted)):
                await uow.groups.remove_members(group_id, [user_id])

            for group_id in wanted:
                if group_id not in current:
                    await uow.groups.add_member(
                        GroupMembership(group_id=group_id, user_id=user_id)
                    )

            if user.group_id not in wanted:
                new_group_id = wanted[0] if wanted else NO_GROUP
                if new_group_id != user.group_id:
                    await uow.users.set_group(user_id, new_group_id)

            await uow.commit()
            return True

    async def update_user_group(self, user_id: int, group_id: int) -> bool:
        """Overwrite the user's current group. 0 clears it."""
        _require_id(user_id, "user_id")
        if group_id < 0:
            raise InvalidInputParameterError("group_id")

        async with self._uow_factory() as uow:
            user = await self._get_user(uow, user_id)

            if group_id == NO_GROUP:
                if user.has_group:
                    await uow.users.set_group(user_id, NO_GROUP)
            else:
                _require_same_tenant(await self._get_group(uow, group_id), user)
                if not await uow.groups.get_member(group_id, user_id):
                    await uow.groups.add_member(
                        GroupMembership(group_id=group_id, user_id=user_id)
                    )
                if user.group_id != group_id:
                    await uow.users.set_group(user_id, group_id)

            await uow.commit()
            return True

    async def get_groups_of_user(self, user_id: int) -> list[Group]:
        """Get all groups a user belongs to."""
        _require_id(user_id, "user_id")

        async with self._uow_factory() as uow:
            return await uow.groups.get_groups_of_user(user_id)

    async def get_group_names_of_user(self, user_id: int) -> list[str]:
        """Get the names of all groups a user belongs to."""
        groups = await self.get_groups_of_user(user_id)
        return [group.name for group in groups]

    async def get_user(self, user_id: int) -> User:
        """Get a directory user by ID."""
        _require_id(user_id, "user_id")

        async with self._uow_factory() as uow:
            return await self._get_user(uow, user_id)

    async def get_user_group(self, user_id: int) -> Group | None:
        """Get the user's current group."""
        _require_id(user_id, "user_id")

        async with self._uow_factory() as uow:
            user = await self._get_user(uow, user_id)
            if not user.has_group:
                return None
            return await uow.groups.get(user.group_id)

    async def clear_user_memberships(self, user_id: int) -> int:
        """Drop all memberships of a user and clear the current group."""
        _require_id(user_id, "user_id")

        async with self._uow_factory() as uow:
            removed = await uow.groups.remove_user_memberships(user_id)
            user = await uow.users.get(user_id)
            if user and user.has_group:
                await uow.users.set_group(user_id, NO_GROUP)
            await uow.commit()
            return removed

    # --- Internal helpers ---

    async def _ensure_default(self, uow: IUnitOfWork, tenant_id: int) -> Group | None:
        """Return the tenant's default group, flagging the first group if none is."""
        if tenant_id == NO_TENANT:
            return None

        default = await uow.groups.get_default(tenant_id)
        if default:
            return default

        first = await uow.groups.get_for_tenant(tenant_id, limit=1)
        if not first:
            return None

        group = first[0]
        await uow.groups.set_default_flag(group.id, True)
        group.is_default = True
        logger.info("default_group_promoted", tenant_id=tenant_id, group_id=group.id)
        return group

    async def _delete(self, uow: IUnitOfWork, group: Group) -> list[int]:
        """Delete a group, its memberships and current-group references."""
        member_ids = await uow.groups.get_group_user_ids(group.id)
        cleared = await uow.users.clear_group(group.id)
        await uow.groups.delete(group.id)

        logger.info("group_deleted", group_id=group.id, tenant_id=group.tenant_id)
        return sorted(set(member_ids).union(cleared))

    async def _add_member(self, uow: IUnitOfWork, group_id: int, user: User) -> None:
        if not await uow.groups.get_member(group_id, user.id):
            await uow.groups.add_member(GroupMembership(group_id=group_id, user_id=user.id))
        if not user.has_group:
            await uow.users.set_group(user.id, group_id)

    async def _get_group(self, uow: IUnitOfWork, group_id: int) -> Group:
        group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(group_id)
        return group

    async def _get_user(self, uow: IUnitOfWork, user_id: int) -> User:
        user = await uow.users.get(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user


def _require_id(value: int, parameter: str) -> None:
    if value <= 0:
        raise InvalidInputParameterError(parameter)


def _require_tenant_id(tenant_id: int, allow_custom: bool = False) -> None:
    if tenant_id < 0 or (tenant_id == NO_TENANT and not allow_custom):
        raise InvalidInputParameterError("tenant_id")


def _require_same_tenant(group: Group, user: User) -> None:
    if not group.is_custom and group.tenant_id != user.tenant_id:
        raise TenantMismatchError(user.id, group.tenant_id)


def _require_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInputParameterError("name")
    return name


def _unique(ids: Iterable[int]) -> Iterable[int]:
    """Drop duplicates, keeping first-seen order."""
    return dict.fromkeys(ids).keys()
