"""
Integration tests for the account store on PostgreSQL.

The schema is built by running the Alembic migration, not create_all, so these
also check that the migration matches what the store expects. Skipped when
Docker is not available.
"""
import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from unittest.mock import patch

import pytest
from alembic import command
from alembic.config import Config
from docker.errors import DockerException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from core.config import get_settings
from schemas.account import AccountUpdate
from services.account_store import AccountStore
from services.exceptions import EmailAlreadyExistsError
from tests.conftest import make_account_create

MIGRATIONS_DIR = Path(__file__).parents[2] / "src" / "db" / "migrations"
HASH = "$2b$12$C6UzMDM.H6dfI/f/IKxGhuDJ0sfNUr4W1Uv3qz6A1W3M6vRs8dVyW"


def _start_postgres() -> PostgresContainer:
    """Start a PostgreSQL container, skipping the caller if Docker is unavailable."""
    # Constructing the container already talks to the Docker daemon
    try:
        container = PostgresContainer("postgres:16", driver="asyncpg")
        container.start()
    except Exception as e:  # noqa: BLE001
        pytest.skip(f"Docker unavailable: {e}")
    return container


@pytest.fixture(scope="module")
def postgres_url() -> Generator[str]:
    """Start PostgreSQL and migrate it to head."""
    container = _start_postgres()
    url = container.get_connection_url()
    previous_url = os.environ.get("DATABASE_URL")
    os.environ["DATABASE_URL"] = url
    get_settings.cache_clear()
    try:
        config = Config()
        config.set_main_option("script_location", str(MIGRATIONS_DIR))
        command.upgrade(config, "head")
        yield url
    finally:
        if previous_url is not None:
            os.environ["DATABASE_URL"] = previous_url
        get_settings.cache_clear()
        container.stop()


@pytest.fixture
async def pg_engine(postgres_url: str) -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(postgres_url, echo=False)
    yield engine
    async with engine.begin() as conn:
        await conn.execute(text("TRUNCATE accounts"))
    await engine.dispose()


@pytest.fixture
def pg_store(pg_engine: AsyncEngine) -> AccountStore:
    return AccountStore(
        async_sessionmaker(pg_engine, class_=AsyncSession, expire_on_commit=False),
    )


class TestAccountStorePostgres:
    """Store behavior that depends on the real database."""

    async def test__create_and_find(self, pg_store: AccountStore) -> None:
        created = await pg_store.create(make_account_create(), HASH)

        found = await pg_store.find_by_email("ada@example.com")

        assert found is not None
        assert found.id == created.id
        assert found.password == HASH
        assert created.created_at.tzinfo is not None

    async def test__unique_email_index(self, pg_store: AccountStore) -> None:
        await pg_store.create(make_account_create(), HASH)

        with pytest.raises(EmailAlreadyExistsError):
            await pg_store.create(make_account_create(), HASH)

    async def test__update_advances_updated_at(self, pg_store: AccountStore) -> None:
        created = await pg_store.create(make_account_create(), HASH)

        updated = await pg_store.update_by_id(created.id, AccountUpdate(city="Paris"))

        assert updated.city == "Paris"
        assert updated.updated_at >= created.updated_at
        assert updated.created_at == created.created_at


class TestDockerUnavailable:
    """Without a Docker daemon the module skips instead of erroring."""

    def test__container_construction_failure__skips(self) -> None:
        with (
            patch(
                f"{__name__}.PostgresContainer",
                side_effect=DockerException("Error while fetching server API version"),
            ),
            pytest.raises(pytest.skip.Exception, match="Docker unavailable"),
        ):
            _start_postgres()

    def test__container_start_failure__skips(self) -> None:
        with (
            patch(f"{__name__}.PostgresContainer") as container_cls,
            pytest.raises(pytest.skip.Exception, match="Docker unavailable"),
        ):
            container_cls.return_value.start.side_effect = DockerException("no daemon")
            _start_postgres()
