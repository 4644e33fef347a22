"""
Barnbook Seed — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the bootstrap and migration paths.
How:   Each exception carries a message and an optional context dict.
       The CLI catches BarnbookError, logs message and context to the error
       channel, and exits with status 1.
Who:   Raised by services and the database layer; caught only by barnbook.cli.

Exception Hierarchy:
    BarnbookError (base)
    ├── ValidationError          seed input or seed file is invalid
    ├── ConfigurationError       unsupported dialect, missing migration scripts
    ├── HashingError             credential transform could not complete
    ├── StoreConnectionError     store unreachable or timed out (ConnectionError)
    ├── DatabaseError            any other store failure
    └── MigrationError           Alembic could not apply a revision

A unique-key collision on users.email is not an error: the insert uses
ON CONFLICT DO NOTHING and the collision never surfaces.
"""

from typing import Any, Dict, Optional


class BarnbookError(Exception):
    """
    Base exception for all Barnbook seeding errors.

    Attributes:
        message:  Operator-facing error description
        context:  Additional debug info (logged, never contains credentials)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BarnbookError):
    """
    Raised when seed input fails validation.

    When:    Empty email, malformed seed file, missing password on stdin.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConfigurationError(BarnbookError):
    """Raised when the configured environment cannot be used at all."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class HashingError(BarnbookError):
    """
    Raised when the Credential Hasher cannot transform a credential.

    When:    Empty credential, text that cannot be UTF-8 encoded, more than
             72 encoded bytes (bcrypt's input limit), or a backend failure.
    Note:    The context never includes the credential itself.
    """

    def __init__(
        self,
        message: str = "The credential could not be hashed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreConnectionError(BarnbookError, ConnectionError):
    """
    Raised when the Persistent Store cannot be reached.

    What:    Connection refused, DNS failure, connect timeout, or the
             connection dropped mid-operation.
    Note:    Also a built-in ConnectionError, so callers that only know the
             standard library taxonomy can still catch it.
    """

    def __init__(
        self,
        message: str = "The database could not be reached",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BarnbookError):
    """
    Raised when a store operation fails for any reason other than connectivity.

    When:    Missing table (migrations not applied), NOT NULL violation, etc.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MigrationError(BarnbookError):
    """Raised when Alembic fails to apply or inspect revisions."""

    def __init__(
        self,
        message: str = "Database migration failed",
        revision: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if revision:
            ctx["revision"] = revision
        super().__init__(message=message, context=ctx)
        self.revision = revision
