"""
Barnbook Seed — Credential Hasher Unit Tests
=============================================

What:  Tests for BcryptHasher (hash, verify, input limits).
How:   Real bcrypt at the minimum cost factor; no mocks needed.

What we test:
    ✅ Hash never equals the plaintext and verifies against it
    ✅ Per-call salt: same input, different hashes
    ✅ Cost factor is embedded in the output
    ✅ Empty, non-encodable and over-long credentials raise HashingError
    ✅ Malformed stored hashes raise HashingError on verify
"""

import pytest

from barnbook.exceptions import HashingError
from barnbook.services.credential_hasher import (
    BCRYPT_MAX_BYTES,
    BcryptHasher,
    CredentialHasher,
)


class TestHash:
    """Tests for BcryptHasher.hash()."""

    def setup_method(self):
        self.hasher = BcryptHasher(rounds=4)

    def test_hash_differs_from_plaintext(self):
        hashed = self.hasher.hash("secret123")
        assert hashed != "secret123"
        assert "secret123" not in hashed

    def test_hash_embeds_scheme_and_cost(self):
        assert self.hasher.hash("secret123").startswith("$2b$04$")

    def test_same_input_produces_different_hashes(self):
        """Each call draws a fresh salt."""
        assert self.hasher.hash("secret123") != self.hasher.hash("secret123")

    def test_empty_credential_rejected(self):
        with pytest.raises(HashingError, match="non-empty"):
            self.hasher.hash("")

    def test_non_string_credential_rejected(self):
        with pytest.raises(HashingError):
            self.hasher.hash(None)

    def test_unencodable_credential_rejected(self):
        """A lone surrogate cannot be encoded as UTF-8."""
        with pytest.raises(HashingError, match="encoded"):
            self.hasher.hash("pass\ud800word")

    def test_credential_at_byte_limit_accepted(self):
        self.hasher.hash("x" * BCRYPT_MAX_BYTES)

    def test_credential_over_byte_limit_rejected(self):
        with pytest.raises(HashingError, match="72 bytes"):
            self.hasher.hash("x" * (BCRYPT_MAX_BYTES + 1))

    def test_byte_limit_counts_encoded_length(self):
        """'é' is two bytes in UTF-8, so 37 of them exceed 72 bytes."""
        with pytest.raises(HashingError):
            self.hasher.hash("é" * 37)

    def test_error_does_not_include_credential(self):
        with pytest.raises(HashingError) as exc_info:
            self.hasher.hash("topsecret" * 10)
        assert "topsecret" not in str(exc_info.value)
        assert "topsecret" not in str(exc_info.value.context)


class TestVerify:
    """Tests for BcryptHasher.verify()."""

    def setup_method(self):
        self.hasher = BcryptHasher(rounds=4)

    def test_verify_matching_credential(self):
        hashed = self.hasher.hash("secret123")
        assert self.hasher.verify("secret123", hashed) is True

    def test_verify_wrong_credential(self):
        hashed = self.hasher.hash("secret123")
        assert self.hasher.verify("secret124", hashed) is False

    def test_verify_hash_from_other_cost(self):
        """The cost is read from the stored hash, not from the verifier."""
        hashed = BcryptHasher(rounds=5).hash("secret123")
        assert self.hasher.verify("secret123", hashed) is True

    def test_verify_malformed_hash_raises(self):
        with pytest.raises(HashingError, match="not a valid bcrypt hash"):
            self.hasher.verify("secret123", "not-a-bcrypt-hash")


class TestConstruction:

    @pytest.mark.parametrize("rounds", [3, 32])
    def test_rounds_out_of_range(self, rounds):
        with pytest.raises(ValueError):
            BcryptHasher(rounds=rounds)

    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            CredentialHasher()
