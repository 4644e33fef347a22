"""Create users table

Revision ID: 001
Revises: None
Create Date: 2026-01-15 00:00:00.000000+00:00

What:  Creates the `users` table the web application signs in against.
How:   Portable column types so the same revision runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table entirely (destructive, all users lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the users table with its unique email constraint.

    Column docs live in barnbook/models/user.py.
    """
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),

        # Natural key; the seeder's ON CONFLICT (email) targets uq_users_email
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Sign-in email, unique and case-sensitive",
        ),

        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash of the credential",
        ),

        sa.Column(
            "name",
            sa.String(255),
            nullable=False,
            server_default=sa.text("''"),
            comment="Display name",
        ),

        sa.Column(
            "weight_lbs",
            sa.Numeric(5, 1),
            nullable=True,
            comment="Rider weight in pounds, used for calorie estimates",
        ),

        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )


def downgrade() -> None:
    """
    Drop the users table entirely.

    WARNING: destructive. Every account, seeded or registered, is lost.
    """
    op.drop_table("users")
