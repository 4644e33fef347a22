"""
Barnbook Seed — Database Session Management
============================================

What:  Async SQLAlchemy engine factory, scoped sessions, store error translation.
How:   The caller creates an engine from settings, acquires one session per
       unit of work through session_scope(), and disposes the engine when done.
       Nothing in this module holds a global connection.
Who:   Used by the seed service, the CLI `check` command, and tests.

Connection Strategy:
    NullPool: every checkout opens a real connection and every release closes
    it. A seeding run performs a handful of statements and exits, so there is
    nothing to pool, and no connection can outlive its session.

Error Translation:
    Driver and SQLAlchemy exceptions never escape this layer untranslated:
        could not connect / timed out / connection dropped → StoreConnectionError
        anything else raised by SQLAlchemy                 → DatabaseError
"""

import asyncio
import logging
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncGenerator, Iterator

from sqlalchemy import inspect, text
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from barnbook.config import Settings
from barnbook.exceptions import BarnbookError, DatabaseError, StoreConnectionError

logger = logging.getLogger(__name__)

# Raised by drivers below SQLAlchemy's wrapping, e.g. asyncpg's connect()
# surfaces ConnectionRefusedError and socket.gaierror directly.
NETWORK_ERRORS = (OSError, asyncio.TimeoutError)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Its metadata is what Alembic compares against for --autogenerate and what
    tests use to create the schema on a throwaway SQLite file.
    """
    pass


# ── Engine Factory ────────────────────────────────────────────────────────
def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build an async engine for the configured store.

    The connect timeout is passed to the driver: asyncpg and aiosqlite both
    accept a `timeout` keyword on connect.
    """
    return create_async_engine(
        settings.database_url,
        poolclass=NullPool,
        connect_args={"timeout": settings.db_connect_timeout},
        # Echo SQL queries in DEBUG mode for development visibility
        echo=settings.log_level == "DEBUG",
    )


# ── Error Translation ─────────────────────────────────────────────────────
@contextmanager
def translate_store_errors(operation: str, connecting: bool = False) -> Iterator[None]:
    """
    Translate store failures raised inside the block into application errors.

    Args:
        operation:  Short label recorded in the error context ("insert", "commit")
        connecting: True while acquiring a connection. Any failure at that
                    point means the store is unreachable.

    Raises:
        StoreConnectionError: connect failure, timeout, or invalidated connection
        DatabaseError: any other SQLAlchemy error
    """
    try:
        yield
    except BarnbookError:
        raise
    except NETWORK_ERRORS as exc:
        raise StoreConnectionError(
            context={"operation": operation, "error_type": type(exc).__name__},
        ) from exc
    except SQLAlchemyError as exc:
        lost_connection = isinstance(exc, InterfaceError) or (
            isinstance(exc, DBAPIError) and exc.connection_invalidated
        )
        if connecting or lost_connection:
            raise StoreConnectionError(
                context={"operation": operation, "error_type": type(exc).__name__},
            ) from exc
        logger.debug("Store error during %s: %s", operation, exc)
        raise DatabaseError(
            message=f"Database operation '{operation}' failed",
            context={"operation": operation, "error_type": type(exc).__name__},
        ) from exc


# ── Scoped Session ────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide an exclusively-owned session for one unit of work.

    How it works:
        1. Creates a new session bound to `engine`
        2. Yields it to the caller
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (the NullPool connection is closed too)

    Usage:
        async with session_scope(engine) as session:
            await seed_service.ensure_seed_identity(session, email, raw, name)
    """
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        try:
            yield session
            with translate_store_errors("commit"):
                await session.commit()
        except Exception:
            # A rollback on a dead connection raises again; keep the original
            # exception as the one that propagates.
            try:
                await session.rollback()
            except (SQLAlchemyError, *NETWORK_ERRORS):
                logger.warning("Rollback failed after an error", exc_info=True)
            raise
        finally:
            await session.close()


# ── Probes ────────────────────────────────────────────────────────────────
async def ping(engine: AsyncEngine) -> None:
    """
    Executes SELECT 1 to verify the store accepts connections and queries.

    Raises:
        StoreConnectionError: the store could not be reached
    """
    with translate_store_errors("ping", connecting=True):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))


async def table_exists(engine: AsyncEngine, table_name: str) -> bool:
    """Reports whether `table_name` exists in the store's default schema."""
    with translate_store_errors("inspect", connecting=True):
        async with engine.connect() as conn:
            return await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).has_table(table_name)
            )
