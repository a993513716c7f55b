"""Host platform event hooks for the groups module."""

from typing import Protocol

import structlog

from domain.services.group_service import GroupService

logger = structlog.get_logger()


class HostEventSubscriber(Protocol):
    """Callbacks the host platform invokes on directory changes."""

    async def on_tenant_deleted(self, tenant_id: int) -> None:
        """Called after a tenant has been deleted."""
        ...

    async def on_user_deleted(self, user_id: int) -> None:
        """Called before a user record is removed."""
        ...

    async def on_user_created(self, user_id: int, tenant_id: int) -> None:
        """Called after a user record has been created."""
        ...


class GroupEventSubscriber:
    """Keeps groups and memberships consistent with the host directory."""

    def __init__(
        self,
        group_service: GroupService,
        assign_default_on_create: bool = False,
    ) -> None:
        self._groups = group_service
        self._assign_default_on_create = assign_default_on_create

    async def on_tenant_deleted(self, tenant_id: int) -> None:
        deleted = await self._groups.delete_tenant_groups(tenant_id)
        logger.info("tenant_groups_deleted", tenant_id=tenant_id, group_count=deleted)

    async def on_user_deleted(self, user_id: int) -> None:
        removed = await self._groups.clear_user_memberships(user_id)
        logger.info("user_memberships_cleared", user_id=user_id, membership_count=removed)

    async def on_user_created(self, user_id: int, tenant_id: int) -> None:
        if not self._assign_default_on_create or tenant_id <= 0:
            return
        await self._groups.reassign_to_default_group(tenant_id, [user_id])


class EventDispatcher:
    """Registry the host dispatches directory events through.

    A failing subscriber is logged and does not keep the event from the
    remaining subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: list[HostEventSubscriber] = []

    def register(self, subscriber: HostEventSubscriber) -> None:
        """Register a subscriber. Registering the same one twice is a no-op."""
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unregister(self, subscriber: HostEventSubscriber) -> None:
        """Remove a previously registered subscriber."""
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    @property
    def subscribers(self) -> list[HostEventSubscriber]:
        return list(self._subscribers)

    async def tenant_deleted(self, tenant_id: int) -> int:
        """Dispatch tenant-deleted. Returns the number of failed subscribers."""
        failures = 0
        for subscriber in self._subscribers:
            try:
                await subscriber.on_tenant_deleted(tenant_id)
            except Exception:
                failures += 1
                logger.exception(
                    "event_subscriber_failed", event="tenant_deleted", tenant_id=tenant_id
                )
        return failures

    async def user_deleted(self, user_id: int) -> int:
        """Dispatch user-deleted. Returns the number of failed subscribers."""
        failures = 0
        for subscriber in self._subscribers:
            try:
                await subscriber.on_user_deleted(user_id)
            except Exception:
                failures += 1
                logger.exception("event_subscriber_failed", event="user_deleted", user_id=user_id)
        return failures

    async def user_created(self, user_id: int, tenant_id: int) -> int:
        """Dispatch user-created. Returns the number of failed subscribers."""
        failures = 0
        for subscriber in self._subscribers:
            try:
                await subscriber.on_user_created(user_id, tenant_id)
            except Exception:
                failures += 1
                logger.exception(
                    "event_subscriber_failed",
                    event="user_created",
                    user_id=user_id,
                    tenant_id=tenant_id,
                )
        return failures
