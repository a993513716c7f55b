"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import StorageError
from infrastructure.database.repositories.sqlalchemy_group_repo import SQLAlchemyGroupRepository
from infrastructure.database.repositories.sqlalchemy_user_repo import SQLAlchemyUserRepository

logger = structlog.get_logger()


class SQLAlchemyUnitOfWork:
    """One session, one transaction per GroupService call.

    Driver and ORM failures leave the context as ``StorageError``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._groups: Optional[SQLAlchemyGroupRepository] = None
        self._users: Optional[SQLAlchemyUserRepository] = None

    @property
    def groups(self) -> SQLAlchemyGroupRepository:
        if self._groups is None:
            self._groups = SQLAlchemyGroupRepository(self._require_session())
        return self._groups

    @property
    def users(self) -> SQLAlchemyUserRepository:
        if self._users is None:
            self._users = SQLAlchemyUserRepository(self._require_session())
        return self._users

    async def commit(self) -> None:
        await self._require_session().commit()

    async def rollback(self) -> None:
        if self._session:
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        session, self._session = self._session, None
        self._groups = self._users = None

        if session:
            try:
                if exc_type:
                    await session.rollback()
            finally:
                await session.close()

        if isinstance(exc_val, SQLAlchemyError):
            logger.error("storage_failure", error=str(exc_val), error_type=type(exc_val).__name__)
            raise StorageError() from exc_val

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._session
