"""
Barnbook Seed — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── sqlite_url: URL of a fresh SQLite file under tmp_path
    ├── unreachable_url: SQLite URL whose directory does not exist
    ├── test_settings: Settings pointed at sqlite_url, bcrypt at 4 rounds
    ├── engine: Async engine with the schema created from the ORM metadata
    ├── bare_engine: Async engine on an empty file (no tables)
    ├── fast_hasher: BcryptHasher(rounds=4)
    ├── seed_service: SeedService using fast_hasher
    └── mock_db_session: Mock AsyncSession for failure-path tests
"""

import os
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any barnbook imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./barnbook_test.db"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost keeps the suite fast
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
for _var in ("SEED_EMAIL", "SEED_PASSWORD", "SEED_DISPLAY_NAME", "SEED_FILE"):
    os.environ.pop(_var, None)

import pytest
import pytest_asyncio
from sqlalchemy import select

from barnbook.config import Settings
from barnbook.database import Base, create_engine
from barnbook.models.user import User
from barnbook.services.credential_hasher import BcryptHasher
from barnbook.services.seed_service import SeedService


async def create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def fetch_users(engine, email=None):
    """All (email, password_hash, name) rows, optionally for one email."""
    query = select(User.email, User.password_hash, User.name).order_by(User.id)
    if email is not None:
        query = query.where(User.email == email)
    async with engine.connect() as conn:
        result = await conn.execute(query)
        return result.all()


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'barnbook.db'}"


@pytest.fixture
def unreachable_url(tmp_path):
    """sqlite3 cannot open a file inside a directory that does not exist."""
    return f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'barnbook.db'}"


@pytest.fixture
def test_settings(sqlite_url):
    return Settings(database_url=sqlite_url, bcrypt_rounds=4, log_level="WARNING")


@pytest_asyncio.fixture
async def engine(test_settings):
    """Engine on a fresh SQLite file with the users table created."""
    eng = create_engine(test_settings)
    await create_schema(eng)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def bare_engine(test_settings):
    """Engine on a fresh SQLite file with no tables (migrations not applied)."""
    eng = create_engine(test_settings)
    yield eng
    await eng.dispose()


@pytest.fixture
def fast_hasher():
    return BcryptHasher(rounds=4)


@pytest.fixture
def seed_service(fast_hasher):
    return SeedService(hasher=fast_hasher)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.connection.return_value.dialect.name = "mysql"
        await seed_service.ensure_seed_identity(mock_db_session, ...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    connection = MagicMock()
    connection.dialect.name = "sqlite"
    session.connection = AsyncMock(return_value=connection)
    return session
