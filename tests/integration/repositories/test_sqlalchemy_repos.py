"""Integration tests for the SQLAlchemy repositories."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import StorageError
from domain.entities.group import Group, GroupMembership
from infrastructure.database.repositories.sqlalchemy_group_repo import SQLAlchemyGroupRepository
from infrastructure.database.repositories.sqlalchemy_user_repo import SQLAlchemyUserRepository

TENANT = 5


@pytest.fixture
def groups(db_session: AsyncSession) -> SQLAlchemyGroupRepository:
    return SQLAlchemyGroupRepository(db_session)


@pytest.fixture
def users(db_session: AsyncSession) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db_session)


class TestGroupRepository:
    async def test_create_assigns_id(self, groups: SQLAlchemyGroupRepository):
        created = await groups.create(Group(tenant_id=TENANT, name="Sales"))

        assert created.id > 0
        assert (await groups.get(created.id)).name == "Sales"

    async def test_get_by_name_is_exact(self, groups: SQLAlchemyGroupRepository):
        await groups.create(Group(tenant_id=TENANT, name="Sales"))

        assert await groups.get_by_name(TENANT, "Sales") is not None
        assert await groups.get_by_name(TENANT, "sales") is None
        assert await groups.get_by_name(TENANT + 1, "Sales") is None

    async def test_paging_and_search(self, groups: SQLAlchemyGroupRepository):
        for name in ["delta", "Alpha", "charlie", "bravo"]:
            await groups.create(Group(tenant_id=TENANT, name=name))
        await groups.create(Group(tenant_id=TENANT + 1, name="Alpine"))

        page = await groups.get_for_tenant(TENANT, offset=1, limit=2)
        matches = await groups.get_for_tenant(TENANT, search="AL")

        assert [g.name for g in page] == ["bravo", "charlie"]
        assert [g.name for g in matches] == ["Alpha"]
        assert await groups.count_for_tenant(TENANT) == 4
        assert await groups.count_for_tenant(TENANT, "a") == 4
        assert await groups.count_for_tenant(TENANT, "zz") == 0

    async def test_default_flag(self, groups: SQLAlchemyGroupRepository):
        group = await groups.create(Group(tenant_id=TENANT, name="Everyone"))
        assert await groups.get_default(TENANT) is None

        await groups.set_default_flag(group.id, True)

        default = await groups.get_default(TENANT)
        assert default is not None and default.id == group.id

    async def test_update_missing_group_raises(self, groups: SQLAlchemyGroupRepository):
        with pytest.raises(ValueError):
            await groups.update(Group(id=999, tenant_id=TENANT, name="Ghost"))

    async def test_delete_removes_memberships(
        self, groups: SQLAlchemyGroupRepository, make_user
    ):
        user_id = await make_user("alice")
        group = await groups.create(Group(tenant_id=TENANT, name="Sales"))
        await groups.add_member(GroupMembership(group_id=group.id, user_id=user_id))

        assert await groups.delete(group.id) is True

        assert await groups.get(group.id) is None
        assert await groups.get_memberships_of_user(user_id) == []
        assert await groups.delete(group.id) is False

    async def test_remove_members_returns_removed_ids(
        self, groups: SQLAlchemyGroupRepository, make_user
    ):
        alice = await make_user("alice")
        bob = await make_user("bob")
        group = await groups.create(Group(tenant_id=TENANT, name="Sales"))
        await groups.add_member(GroupMembership(group_id=group.id, user_id=alice))

        removed = await groups.remove_members(group.id, [alice, bob])

        assert removed == [alice]
        assert await groups.get_group_user_ids(group.id) == []

    async def test_groups_of_user_ordered_by_name(
        self, groups: SQLAlchemyGroupRepository, make_user
    ):
        user_id = await make_user("alice")
        zeta = await groups.create(Group(tenant_id=TENANT, name="Zeta"))
        alpha = await groups.create(Group(tenant_id=TENANT, name="Alpha"))
        for group in (zeta, alpha):
            await groups.add_member(GroupMembership(group_id=group.id, user_id=user_id))

        result = await groups.get_groups_of_user(user_id)

        assert [g.name for g in result] == ["Alpha", "Zeta"]
        assert await groups.remove_user_memberships(user_id) == 2


class TestUserRepository:
    async def test_get_many_orders_by_public_id(
        self, users: SQLAlchemyUserRepository, make_user
    ):
        bob = await make_user("bob")
        amy = await make_user("amy")

        result = await users.get_many([bob, amy, 999])

        assert [u.id for u in result] == [amy, bob]
        assert await users.get_many([]) == []

    async def test_set_and_clear_group(self, users: SQLAlchemyUserRepository, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob", group_id=3)

        await users.set_group(alice, 3)
        cleared = await users.clear_group(3, [alice])

        assert cleared == [alice]
        assert (await users.get(alice)).group_id == 0
        assert (await users.get(bob)).group_id == 3
        assert await users.clear_group(3) == [bob]

    async def test_set_group_on_missing_user(self, users: SQLAlchemyUserRepository):
        with pytest.raises(ValueError):
            await users.set_group(404, 1)


class TestUnitOfWork:
    async def test_commit_persists(self, uow_factory):
        async with uow_factory() as uow:
            created = await uow.groups.create(Group(tenant_id=TENANT, name="Sales"))
            await uow.commit()

        async with uow_factory() as uow:
            assert await uow.groups.get(created.id) is not None

    async def test_leaving_without_commit_discards(self, uow_factory):
        async with uow_factory() as uow:
            created = await uow.groups.create(Group(tenant_id=TENANT, name="Sales"))

        async with uow_factory() as uow:
            assert await uow.groups.get(created.id) is None

    async def test_storage_failures_become_storage_error(self, uow_factory):
        with pytest.raises(StorageError):
            async with uow_factory() as uow:
                await uow.groups.create(Group(tenant_id=TENANT, name="Sales"))
                raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    def test_repositories_need_context(self, uow_factory):
        with pytest.raises(RuntimeError):
            uow_factory().groups
