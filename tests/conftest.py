"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any, Callable
from uuid import UUID

# Disable rate limiting and the Postgres LISTEN feed in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REALTIME_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.chat import DEFAULT_ROOMS
from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.database.models import Base, ChatRoomModel, ProfileModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory, one shared connection)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = UUID("6f1d3a2e-8b4c-4e0f-9a7d-2c5b8e1f4a36")
OTHER_USER_ID = UUID("0b9e7c4d-1a2f-4d3e-8c6b-5f7a9e2d1c80")


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables and the default rooms."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(
    engine: AsyncEngine,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create session factory and seed the default rooms."""
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with factory() as session:
        session.add_all(
            ChatRoomModel(id=room.id, name=room.name, description=room.description)
            for room in DEFAULT_ROOMS
        )
        await session.commit()
    yield factory


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def test_user() -> Identity:
    """A signed-in identity with a display name in its metadata."""
    return Identity(
        id=TEST_USER_ID,
        email="test@example.com",
        metadata={"full_name": "Test User"},
        role="authenticated",
    )


@pytest.fixture
def other_user() -> Identity:
    """A second identity, used for ownership checks."""
    return Identity(
        id=OTHER_USER_ID,
        email="other@example.com",
        metadata={"user_name": "other"},
        role="authenticated",
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
def auth_token(auth_provider: JWTAuthProvider, test_user: Identity) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def app(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[Any, None]:
    """
    Application wired to the test database.

    - Services share one provisioning guard on the test Unit of Work factory
    - Auth validates tokens signed with the test secret
    - The message feed is in-process only
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_catalog_service,
        get_chat_service,
        get_favorite_service,
        get_message_feed,
        get_profile_service,
        get_review_service,
        get_synchronizer_factory,
    )
    from domain.services.catalog_service import CatalogService
    from domain.services.chat_service import ChatService
    from domain.services.message_sync import RoomMessageSynchronizer
    from domain.services.profile_provisioning import ProfileProvisioningGuard
    from domain.services.profile_service import ProfileService
    from domain.services.review_service import FavoriteService, ReviewService
    from infrastructure.realtime.message_feed import MessageFeed
    from main import create_app

    app = create_app()
    guard = ProfileProvisioningGuard(uow_factory)
    feed = MessageFeed()

    def synchronizer_factory() -> RoomMessageSynchronizer:
        return RoomMessageSynchronizer(uow_factory, feed)

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_profile_service] = lambda: ProfileService(uow_factory, guard)
    app.dependency_overrides[get_catalog_service] = lambda: CatalogService(uow_factory, guard)
    app.dependency_overrides[get_review_service] = lambda: ReviewService(uow_factory, guard)
    app.dependency_overrides[get_favorite_service] = lambda: FavoriteService(uow_factory, guard)
    app.dependency_overrides[get_chat_service] = lambda: ChatService(uow_factory, guard)
    app.dependency_overrides[get_message_feed] = lambda: feed
    app.dependency_overrides[get_synchronizer_factory] = lambda: synchronizer_factory
    app.state.test_feed = feed

    yield app

    app.dependency_overrides.clear()
    await feed.close()


@pytest.fixture
async def authenticated_client(
    app: Any,
    session_factory: async_sessionmaker[AsyncSession],
    test_user: Identity,
    auth_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Client that sends a valid bearer token for ``test_user``.

    The profile is not pre-created: the first authenticated call provisions it.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c


@pytest.fixture
async def anonymous_client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Client for the test app without credentials."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def token_for(auth_provider: JWTAuthProvider) -> Callable[[Identity], dict[str, str]]:
    """Build authorization headers for an arbitrary identity."""

    def build(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_provider.create_token(identity)}"}

    return build


async def add_profile(
    session_factory: async_sessionmaker[AsyncSession], id: UUID, username: str
) -> None:
    """Insert a profile row directly."""
    async with session_factory() as session:
        session.add(ProfileModel(id=id, username=username))
        await session.commit()


