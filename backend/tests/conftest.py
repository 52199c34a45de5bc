"""Root conftest — shared test configuration and store fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite store with the users table created
    - No test reaches a real PostgreSQL server
"""

import os

# Environment must be set before account_service.main builds its module-level app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_SSL", "false")

import pytest  # noqa: E402

from account_service.config import Settings  # noqa: E402
from account_service.db.base import Base  # noqa: E402
from account_service.infrastructure.database import DatabaseSessionManager  # noqa: E402
from account_service.infrastructure.user_gateway import UserGateway  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings():
    return Settings(database_url=TEST_DATABASE_URL, db_ssl=False)


@pytest.fixture
async def db_manager():
    manager = DatabaseSessionManager(TEST_DATABASE_URL)
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def gateway(db_manager):
    return UserGateway(db_manager)
