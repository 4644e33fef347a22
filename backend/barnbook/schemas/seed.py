"""
Barnbook Seed — Pydantic Seed Schemas
======================================

What:  Input and result models for seeding, plus seed file loading.
How:   SeedIdentity validates one record; load_seed_file() parses a JSON array
       of records; SeedReport is what seed_identities() returns.
Who:   Built by the CLI from settings, arguments, or a seed file.

Seed File Format:
    [
        {"email": "rider@barnbook.local", "password": "...", "display_name": "Test Rider"},
        {"email": "trainer@barnbook.local", "password": "...", "display_name": "Trainer"}
    ]
"""

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, SecretStr, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from barnbook.config import Settings
from barnbook.exceptions import ValidationError


class SeedIdentity(BaseModel):
    """
    One identity to ensure exists.

    The password is a SecretStr: it prints and logs as '**********' and is
    only unwrapped right before hashing.
    """

    email: str = Field(min_length=1, max_length=255, description="Unique sign-in email")
    password: SecretStr = Field(description="Plaintext credential, hashed before storage")
    display_name: str = Field(default="", max_length=255)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("email")
    @classmethod
    def email_not_blank(cls, v: str) -> str:
        # Case is preserved: the application matches email case-sensitively.
        if not v.strip():
            raise ValueError("email must not be blank")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("password must not be empty")
        return v


class SeedReport(BaseModel):
    """
    Outcome of a successful seeding run.

    `processed` counts identities ensured. It does not say how many rows
    were inserted: an identity that already existed counts the same.
    """

    processed: int = Field(default=0, ge=0)
    emails: List[str] = Field(default_factory=list)


_identity_list = TypeAdapter(List[SeedIdentity])


def load_seed_file(path: str) -> List[SeedIdentity]:
    """
    Parse a JSON seed file into identities.

    Raises:
        ValidationError: file missing/unreadable, not a JSON array of
                         identities, empty, or listing an email twice
    """
    seed_path = Path(path)
    try:
        raw = seed_path.read_bytes()
    except OSError as e:
        raise ValidationError(
            message=f"Seed file '{path}' could not be read",
            field="seed_file",
            context={"error_type": type(e).__name__},
        ) from e

    try:
        identities = _identity_list.validate_json(raw)
    except PydanticValidationError as e:
        # include_input=False keeps passwords out of the error text
        errors = e.errors(include_input=False, include_url=False)
        raise ValidationError(
            message=f"Seed file '{path}' is invalid: {len(errors)} error(s)",
            field="seed_file",
            context={"errors": [f"{err['loc']}: {err['msg']}" for err in errors]},
        ) from None

    if not identities:
        raise ValidationError(message=f"Seed file '{path}' lists no identities", field="seed_file")

    seen = set()
    for identity in identities:
        if identity.email in seen:
            raise ValidationError(
                message=f"Seed file '{path}' lists {identity.email} more than once",
                field="seed_file",
            )
        seen.add(identity.email)
    return identities


def identities_from_settings(settings: Settings) -> List[SeedIdentity]:
    """Identities to seed when the CLI is given no explicit source."""
    if settings.seed_file:
        return load_seed_file(settings.seed_file)
    try:
        return [
            SeedIdentity(
                email=settings.seed_email,
                password=settings.seed_password,
                display_name=settings.seed_display_name,
            )
        ]
    except PydanticValidationError as e:
        errors = e.errors(include_input=False, include_url=False)
        raise ValidationError(
            message="Configured seed identity is invalid",
            field="seed_email",
            context={"errors": [f"{err['loc']}: {err['msg']}" for err in errors]},
        ) from None
