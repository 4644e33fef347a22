"""
Barnbook Seed — Configuration Tests
====================================

What:  Tests for Settings validation and development-default warnings.
How:   Settings built directly with keyword arguments or monkeypatched env.

What we test:
    ✅ Defaults for the seed identity and bcrypt cost
    ✅ Log level normalization and rejection of unknown levels
    ✅ Empty DATABASE_URL and out-of-range numbers rejected
    ✅ The seed password never appears in repr()
    ✅ Warning when the development password would be written
"""

import pytest
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from barnbook.config import DEFAULT_SEED_PASSWORD, Settings, get_settings


class TestDefaults:

    def test_seed_identity_defaults(self, monkeypatch):
        for var in ("BCRYPT_ROUNDS", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        s = Settings(_env_file=None)

        assert s.seed_email == "rider@barnbook.local"
        assert s.seed_display_name == "Test Rider"
        assert s.seed_password.get_secret_value() == DEFAULT_SEED_PASSWORD
        assert s.seed_file is None
        assert s.bcrypt_rounds == 10
        assert s.db_connect_timeout == 10
        assert s.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SEED_EMAIL", "trainer@example.test")
        monkeypatch.setenv("SEED_PASSWORD", "horse-battery")
        monkeypatch.setenv("BCRYPT_ROUNDS", "12")
        s = Settings(_env_file=None)

        assert s.seed_email == "trainer@example.test"
        assert s.seed_password.get_secret_value() == "horse-battery"
        assert s.bcrypt_rounds == 12

    def test_password_hidden_in_repr(self):
        s = Settings(seed_password=SecretStr("horse-battery"))
        assert "horse-battery" not in repr(s)
        assert "horse-battery" not in str(s.model_dump())


class TestValidation:

    @pytest.mark.parametrize("level", ["debug", "Info", "WARNING"])
    def test_log_level_normalized(self, level):
        assert Settings(log_level=level).log_level == level.upper()

    def test_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="VERBOSE")

    @pytest.mark.parametrize("url", ["", "   "])
    def test_empty_database_url_rejected(self, url):
        with pytest.raises(PydanticValidationError):
            Settings(database_url=url)

    @pytest.mark.parametrize("rounds", [3, 32])
    def test_bcrypt_rounds_range(self, rounds):
        with pytest.raises(PydanticValidationError):
            Settings(bcrypt_rounds=rounds)

    @pytest.mark.parametrize("timeout", [0, 121])
    def test_connect_timeout_range(self, timeout):
        with pytest.raises(PydanticValidationError):
            Settings(db_connect_timeout=timeout)


class TestDefaultCredentialWarnings:

    def test_warns_on_development_password(self):
        warnings = Settings(seed_password=SecretStr(DEFAULT_SEED_PASSWORD)).default_credential_warnings()
        assert len(warnings) == 1
        assert "SEED_PASSWORD" in warnings[0]
        assert DEFAULT_SEED_PASSWORD not in warnings[0]

    def test_no_warning_with_custom_password(self):
        assert Settings(seed_password=SecretStr("horse-battery")).default_credential_warnings() == []

    def test_no_warning_with_seed_file(self):
        s = Settings(seed_password=SecretStr(DEFAULT_SEED_PASSWORD), seed_file="seeds.json")
        assert s.default_credential_warnings() == []


class TestGetSettings:

    def test_cached(self):
        """get_settings() should build Settings once and reuse it."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()

    def test_invalid_environment_raises_on_call_not_import(self, monkeypatch):
        """A bad env value should only fail when settings are actually read."""
        monkeypatch.setenv("BCRYPT_ROUNDS", "99")
        get_settings.cache_clear()
        try:
            with pytest.raises(PydanticValidationError):
                get_settings()
        finally:
            get_settings.cache_clear()
