"""
Barnbook Seed — User SQLAlchemy Model
======================================

What:  ORM model for the `users` table the web application authenticates against.
How:   Inherits from the shared DeclarativeBase; Alembic revision 001 creates it.
Who:   Written by the seed service; read by the application's login flow
       (SELECT id, name, email, password_hash FROM users WHERE email = $1).

Table Design:
    - email: natural key, case-sensitive, unique (uq_users_email). The
      seeder's ON CONFLICT (email) DO NOTHING relies on this constraint.
    - password_hash: bcrypt output ($2b$...), never the plaintext.
    - name: display name shown in the application.
    - weight_lbs: rider weight for the ride calorie estimate; never seeded.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from barnbook.database import Base


class User(Base):
    """
    An identity that can sign in to the Barnbook web application.

    Lifecycle:
        1. Created by the seeder (or the registration page, outside this repo)
        2. Profile fields (name, weight_lbs) edited by the application
        3. Never mutated or deleted by the seeder
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Sign-in email, unique and case-sensitive",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the credential",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        server_default=text("''"),
        comment="Display name",
    )

    weight_lbs: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 1),
        nullable=True,
        default=None,
        comment="Rider weight in pounds, used for calorie estimates",
    )

    # All timestamps stored in UTC
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        # password_hash omitted
        return f"<User(id={self.id}, email='{self.email}')>"
