"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator

# Settings are validated when api.main is imported; these must exist first.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret-key-long-enough-for-hs256-signing"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("JWT_SECRET_KEY", TEST_JWT_SECRET)
os.environ.setdefault("REDIS_ENABLED", "false")

import pytest  # noqa: E402
from fakeredis import FakeAsyncRedis  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.account_cache import AccountCache  # noqa: E402
from core.config import Settings, get_settings  # noqa: E402
from core.redis import RedisClient  # noqa: E402
from models import Base  # noqa: E402
from schemas.account import AccountCreate  # noqa: E402
from services.account_store import AccountStore  # noqa: E402
from services.identity_service import IdentityService  # noqa: E402


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create an in-memory SQLite engine with the schema applied.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        os.environ["DATABASE_URL"],
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def fake_redis() -> AsyncGenerator[FakeAsyncRedis]:
    """In-process Redis server, emptied before each test."""
    server = FakeAsyncRedis()
    await server.flushdb()
    yield server


@pytest.fixture
async def redis_client(fake_redis: FakeAsyncRedis) -> AsyncGenerator[RedisClient]:
    """RedisClient wired to the fake server."""
    client = RedisClient(url="redis://localhost:6379")
    client.attach(fake_redis)
    yield client
    await client.close()


@pytest.fixture
def account_cache(redis_client: RedisClient) -> AccountCache:
    """Account cache over the fake Redis."""
    return AccountCache(redis_client)


@pytest.fixture
def account_store(session_factory: async_sessionmaker[AsyncSession]) -> AccountStore:
    """Account store over the test database."""
    return AccountStore(session_factory)


@pytest.fixture
def identity_service(
    account_store: AccountStore,
    account_cache: AccountCache,
) -> IdentityService:
    """Identity service wired to the test database and fake Redis."""
    return IdentityService(
        store=account_store,
        cache=account_cache,
        jwt_secret=TEST_JWT_SECRET,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings used by the API under test, independent of the real environment."""
    return Settings(
        _env_file=None,
        database_url=TEST_DATABASE_URL,
        JWT_SECRET_KEY=TEST_JWT_SECRET,
        REDIS_ENABLED=False,
    )


@pytest.fixture
async def client(
    identity_service: IdentityService,
    session_factory: async_sessionmaker[AsyncSession],
    redis_client: RedisClient,
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient]:
    """
    Create a test client wired to the test database and fake Redis.

    ASGITransport does not run the lifespan, so the objects it would build are
    placed on app.state directly.
    """
    get_settings.cache_clear()

    from api.main import app

    app.state.identity_service = identity_service
    app.state.session_factory = session_factory
    app.state.redis_client = redis_client
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_account_create(**overrides: object) -> AccountCreate:
    """Build a valid registration payload."""
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "password": "secret1",
    }
    data.update(overrides)
    return AccountCreate(**data)
