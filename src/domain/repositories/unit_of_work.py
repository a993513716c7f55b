"""Unit of Work protocol."""

from typing import Any, Protocol

from domain.repositories.group_repository import IGroupRepository
from domain.repositories.user_repository import IUserRepository


class IUnitOfWork(Protocol):
    """One transaction over the group store and the user directory.

    Leaving the context without ``commit()`` discards every write made
    through ``groups`` and ``users``.
    """

    groups: IGroupRepository
    users: IUserRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...
