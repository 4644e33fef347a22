"""
Barnbook Seed — Credential Hasher
==================================

What:  One-way, salted, intentionally slow transform from plaintext credential
       to a storage-safe hash string.
How:   CredentialHasher is the abstract contract; BcryptHasher implements it
       with the `bcrypt` library. Each hash() call draws a fresh random salt,
       which is embedded in the output ($2b$<rounds>$<salt><digest>).
Who:   Called by SeedService before every insert; verify() is used by tests
       and by operators checking a seeded account.

Work Factor:
    rounds=10 → 2**10 key-expansion iterations, roughly 50-100ms per hash.
    The web application verifies with bcryptjs, which reads the cost from the
    hash itself, so raising BCRYPT_ROUNDS needs no application change.

Input Limits:
    bcrypt only consumes the first 72 bytes of input. Longer credentials are
    rejected instead of being silently truncated.
"""

from abc import ABC, abstractmethod

import bcrypt

from barnbook.exceptions import HashingError

BCRYPT_MAX_BYTES = 72


class CredentialHasher(ABC):
    """
    Abstract interface for credential hashing schemes.

    Contract:
        - hash() never returns the input and never returns the same string
          twice for the same input (per-call salt)
        - verify() returns False on mismatch; it raises only when the stored
          hash cannot be parsed
        - implementation errors are wrapped in HashingError
    """

    @abstractmethod
    def hash(self, raw_credential: str) -> str:
        """
        Transform a plaintext credential into an opaque hash string.

        Raises:
            HashingError: the credential cannot be hashed
        """
        ...

    @abstractmethod
    def verify(self, raw_credential: str, credential_hash: str) -> bool:
        """Check a plaintext credential against a stored hash."""
        ...


class BcryptHasher(CredentialHasher):
    """bcrypt with a configurable cost factor."""

    def __init__(self, rounds: int = 10):
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds

    def _encode(self, raw_credential: str) -> bytes:
        if not isinstance(raw_credential, str) or not raw_credential:
            raise HashingError(message="Credential must be a non-empty string")
        try:
            encoded = raw_credential.encode("utf-8")
        except UnicodeEncodeError as e:
            raise HashingError(
                message="Credential is not valid text and cannot be encoded",
                context={"position": e.start},
            ) from None
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise HashingError(
                message=f"Credential exceeds {BCRYPT_MAX_BYTES} bytes when encoded",
                context={"encoded_length": len(encoded)},
            )
        return encoded

    def hash(self, raw_credential: str) -> str:
        encoded = self._encode(raw_credential)
        try:
            digest = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError) as e:
            raise HashingError(
                message="bcrypt failed to hash the credential",
                context={"error_type": type(e).__name__},
            ) from None
        return digest.decode("ascii")

    def verify(self, raw_credential: str, credential_hash: str) -> bool:
        encoded = self._encode(raw_credential)
        try:
            return bcrypt.checkpw(encoded, credential_hash.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as e:
            raise HashingError(
                message="Stored credential hash is not a valid bcrypt hash",
                context={"error_type": type(e).__name__},
            ) from None
