"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.group_events import EventDispatcher, GroupEventSubscriber
from domain.services.group_service import GroupService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_group_service() -> GroupService:
    """Get Group service instance."""
    return GroupService(get_uow_factory())


@lru_cache
def get_event_dispatcher() -> EventDispatcher:
    """Get the host event dispatcher with the groups subscriber registered."""
    dispatcher = EventDispatcher()
    dispatcher.register(
        GroupEventSubscriber(
            get_group_service(),
            assign_default_on_create=settings.assign_default_group_on_user_create,
        )
    )
    return dispatcher
