"""
Barnbook Seed — Package Initializer
====================================

What: Administrative bootstrap tooling for the Barnbook database.
Who:  Imported by the `barnbook-seed` console script, Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        CLI (barnbook.cli)           │  ← argument parsing, exit codes
    ├─────────────────────────────────────┤
    │   Services (seed, hasher, migrate)  │  ← idempotent bootstrap logic
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Only the CLI layer knows about process exit status. Everything below it
    returns values or raises exceptions from barnbook.exceptions.
"""

__version__ = "1.0.0"
