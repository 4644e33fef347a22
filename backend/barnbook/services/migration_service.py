"""
Barnbook Seed — Migration Service
==================================

What:  Applies and inspects schema migrations for the Barnbook database.
How:   Wraps Alembic. Revisions live in backend/alembic/versions and are
       recorded in the store's `alembic_version` table, so each one is
       applied once and in order.
Who:   Called by the CLI `migrate` and `check` commands.
When:  Before the first seed against a fresh database, and on every deploy.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from barnbook.config import Settings
from barnbook.database import create_engine, ping, translate_store_errors
from barnbook.exceptions import ConfigurationError, MigrationError

logger = logging.getLogger(__name__)


def alembic_config(settings: Settings) -> Config:
    """
    Build an Alembic Config without an alembic.ini file.

    Raises:
        ConfigurationError: the script location has no env.py
    """
    script_location = Path(settings.alembic_script_location)
    if not (script_location / "env.py").is_file():
        raise ConfigurationError(
            message=f"No Alembic environment found at '{script_location}'",
            context={"alembic_script_location": str(script_location)},
        )
    config = Config()
    config.set_main_option("script_location", str(script_location))
    # ConfigParser interpolation treats '%' specially
    config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))
    return config


def head_revision(settings: Settings) -> Optional[str]:
    """The newest revision available in the migration scripts."""
    script = ScriptDirectory.from_config(alembic_config(settings))
    return script.get_current_head()


async def current_revision(engine: AsyncEngine) -> Optional[str]:
    """The revision the store is at, or None if no migration ever ran."""
    with translate_store_errors("inspect", connecting=True):
        async with engine.connect() as conn:
            return await conn.run_sync(
                lambda sync_conn: MigrationContext.configure(sync_conn).get_current_revision()
            )


async def _probe(settings: Settings) -> None:
    engine = create_engine(settings)
    try:
        await ping(engine)
    finally:
        await engine.dispose()


def upgrade(settings: Settings, revision: str = "head") -> None:
    """
    Upgrade the store to `revision`.

    Must be called outside a running event loop: Alembic's env.py drives
    the async engine with asyncio.run().

    Raises:
        StoreConnectionError: the store could not be reached
        MigrationError: Alembic failed to apply a revision
    """
    config = alembic_config(settings)
    asyncio.run(_probe(settings))

    logger.info("Upgrading database schema to %s", revision)
    try:
        command.upgrade(config, revision)
    except CommandError as e:
        raise MigrationError(message=str(e), revision=revision) from e
    except SQLAlchemyError as e:
        raise MigrationError(
            message=f"Migration to '{revision}' failed",
            revision=revision,
            context={"error_type": type(e).__name__},
        ) from e
    logger.info("Database schema is at %s", revision)
