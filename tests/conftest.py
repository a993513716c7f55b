"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.user import UserRole
from domain.services.group_service import GroupService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, UserModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

# Test database URL (SQLite in memory, one database per test)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Tenant the test admin administers
TEST_TENANT_ID = 5

# Fixed test user ID for consistency
TEST_USER_ID = 1


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def group_service(uow_factory: Callable[[], SQLAlchemyUnitOfWork]) -> GroupService:
    """GroupService running against the test database."""
    return GroupService(uow_factory)


@pytest.fixture
def make_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[int]]:
    """Insert a directory user and return its ID."""

    async def _make_user(public_id: str, tenant_id: int = TEST_TENANT_ID, group_id: int = 0) -> int:
        async with session_factory() as session:
            user = UserModel(public_id=public_id, tenant_id=tenant_id, group_id=group_id)
            session.add(user)
            await session.commit()
            return user.id

    return _make_user


@pytest.fixture
def test_user() -> TokenUser:
    """Tenant admin of TEST_TENANT_ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="admin@example.com",
        tenant_id=TEST_TENANT_ID,
        role=UserRole.TENANT_ADMIN,
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth, no database overrides)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def authenticated_client(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
    auth_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create authenticated test client with database and auth overrides.

    This client:
    - Uses an in-memory SQLite database
    - Validates tokens with the test auth provider
    - Overrides the group service and event dispatcher to use the test database
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import get_event_dispatcher, get_group_service
    from domain.services.group_events import EventDispatcher, GroupEventSubscriber
    from main import create_app

    app = create_app()

    service = GroupService(uow_factory)
    dispatcher = EventDispatcher()
    dispatcher.register(GroupEventSubscriber(service, assign_default_on_create=True))

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_group_service] = lambda: service
    app.dependency_overrides[get_event_dispatcher] = lambda: dispatcher

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c

    app.dependency_overrides.clear()
