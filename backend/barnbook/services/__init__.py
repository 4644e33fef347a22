# Services package init
"""
Barnbook Seed — Services Layer
===============================

What:  Bootstrap logic sitting between the CLI and the database layer.

Service Inventory:
    - CredentialHasher (abstract): Interface for one-way credential hashing
    - BcryptHasher: Concrete implementation using the bcrypt library
    - SeedService: Idempotent insert-or-ignore of seed identities
    - migration_service: Alembic upgrade and revision inspection
"""
