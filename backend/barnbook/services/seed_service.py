"""
Barnbook Seed — Seed Service (Bootstrap Seeder)
================================================

What:  Guarantees that designated baseline identities exist in `users`,
       without creating duplicates, overwriting existing rows, or storing
       a plaintext credential.
How:   Hash the credential, then issue a single
           INSERT INTO users (email, password_hash, name) VALUES (...)
           ON CONFLICT (email) DO NOTHING
       Running it N times leaves the same end state as running it once.
Who:   Called by the CLI `seed` command and by tests.

Flow (per identity):
    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │  Validate    │───▶│  Hash        │───▶│  Acquire     │───▶│  Insert  │
    │  email       │    │  (thread)    │    │  connection  │    │  or skip │
    └──────────────┘    └──────────────┘    └──────────────┘    └──────────┘

    ValidationError / HashingError: nothing was sent to the store.
    StoreConnectionError: the store could not be reached; no row written.
    Commit, rollback and close belong to database.session_scope().

Multiple Identities:
    Each identity gets its own session and transaction. The first failure
    stops the run; identities seeded before it stay seeded, since each
    insert is independently idempotent.
"""

import asyncio
import logging
from typing import Iterable, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from barnbook.config import Settings
from barnbook.database import create_engine, session_scope, translate_store_errors
from barnbook.exceptions import ConfigurationError, ValidationError
from barnbook.models.user import User
from barnbook.schemas.seed import SeedIdentity, SeedReport
from barnbook.services.credential_hasher import BcryptHasher, CredentialHasher

logger = logging.getLogger(__name__)

# Dialects whose INSERT supports ON CONFLICT (...) DO NOTHING
_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SeedService:
    """
    Idempotent bootstrap of identity records.

    The service is stateless apart from its hasher (BcryptHasher at the
    default cost unless one is given). Sessions are always passed in by
    the caller, never created or cached here.
    """

    def __init__(self, hasher: Optional[CredentialHasher] = None):
        self.hasher = hasher or BcryptHasher()

    def _insert_ignoring_conflicts(self, dialect_name: str, values: dict):
        insert = _CONFLICT_INSERTS.get(dialect_name)
        if insert is None:
            raise ConfigurationError(
                message=f"Database dialect '{dialect_name}' is not supported for seeding",
                context={"supported": sorted(_CONFLICT_INSERTS)},
            )
        return insert(User).values(**values).on_conflict_do_nothing(
            index_elements=["email"]
        )

    async def ensure_seed_identity(
        self,
        session: AsyncSession,
        email: str,
        raw_credential: str,
        display_name: str,
    ) -> None:
        """
        Ensure a user with `email` exists, creating it if absent.

        Returns None whether the row was created or already existed.

        Args:
            session: Exclusively-owned session from database.session_scope()
            email: Uniqueness key, used as given (case-sensitive)
            raw_credential: Plaintext secret; hashed, never logged or stored
            display_name: Stored in users.name on creation only

        Raises:
            ValidationError: email is empty
            HashingError: the credential could not be hashed
            StoreConnectionError: the store is unreachable
            DatabaseError: the insert failed for another reason
            ConfigurationError: the store's dialect has no conflict-safe insert
        """
        if not isinstance(email, str) or not email.strip():
            raise ValidationError(message="Seed email must be a non-empty string", field="email")

        # bcrypt is CPU-bound for tens of milliseconds; keep the loop free
        credential_hash = await asyncio.to_thread(self.hasher.hash, raw_credential)

        with translate_store_errors("connect", connecting=True):
            connection = await session.connection()

        statement = self._insert_ignoring_conflicts(
            connection.dialect.name,
            {
                "email": email,
                "password_hash": credential_hash,
                "name": display_name,
            },
        )
        with translate_store_errors("insert"):
            await session.execute(statement)

        logger.info("Seed identity ensured: %s", email)

    async def seed_identities(
        self,
        engine: AsyncEngine,
        identities: Iterable[SeedIdentity],
    ) -> SeedReport:
        """
        Ensure every identity exists, each in its own transaction.

        Stops at the first failure and lets the exception propagate.
        """
        report = SeedReport()
        for identity in identities:
            async with session_scope(engine) as session:
                await self.ensure_seed_identity(
                    session,
                    identity.email,
                    identity.password.get_secret_value(),
                    identity.display_name,
                )
            report.processed += 1
            report.emails.append(identity.email)
        return report


async def run_seed(settings: Settings, identities: Iterable[SeedIdentity]) -> SeedReport:
    """
    Seed `identities` against the store described by `settings`.

    The engine lives for this call only and is disposed on every exit path.
    """
    service = SeedService(hasher=BcryptHasher(rounds=settings.bcrypt_rounds))
    engine = create_engine(settings)
    try:
        return await service.seed_identities(engine, identities)
    finally:
        await engine.dispose()
