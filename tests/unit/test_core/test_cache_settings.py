"""Unit tests for response cache and logging settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from response_cache.core.settings import (
    LoggingSettings,
    ResponseCacheSettings,
    clear_settings_cache,
    get_response_cache_settings,
)
from response_cache.core.settings._sanitizers import strip_inline_comment


@pytest.mark.unit
class TestResponseCacheSettings:
    """Test suite for ResponseCacheSettings."""

    def test_defaults(self):
        """Test that the default cache is enabled and unbounded."""
        settings = ResponseCacheSettings()

        assert settings.enabled is True
        assert settings.max_entries is None
        assert settings.ttl is None
        assert settings.ttl_per_type == {}
        assert settings.ignored_types == frozenset()
        assert settings.parse_cache_size == 1024
        assert settings.prune_interval == 60

    def test_frozen(self):
        """Test that settings instances are immutable."""
        settings = ResponseCacheSettings()

        with pytest.raises(ValidationError):
            settings.ttl = 10

    def test_max_entries_must_be_positive(self):
        """Test that a zero capacity is rejected."""
        with pytest.raises(ValidationError):
            ResponseCacheSettings(max_entries=0)

    def test_negative_ttl_rejected(self):
        """Test that the default TTL cannot be negative."""
        with pytest.raises(ValidationError):
            ResponseCacheSettings(ttl=-1)

    def test_zero_ttl_allowed(self):
        """Test that a zero TTL is accepted and disables storing."""
        assert ResponseCacheSettings(ttl=0).ttl_for_types({"User"}) == 0

    def test_negative_ttl_from_environment(self, monkeypatch):
        """Test that a negative RESPONSE_CACHE_TTL fails validation."""
        monkeypatch.setenv("RESPONSE_CACHE_TTL", "-5")

        with pytest.raises(ValidationError):
            ResponseCacheSettings()

    def test_negative_type_ttl_rejected(self):
        """Test that per-type TTLs cannot be negative."""
        with pytest.raises(ValidationError):
            ResponseCacheSettings(ttl_per_type={"User": -1})

    def test_from_environment(self, monkeypatch):
        """Test loading every field from RESPONSE_CACHE_ variables."""
        monkeypatch.setenv("RESPONSE_CACHE_MAX_ENTRIES", "500  # per pod")
        monkeypatch.setenv("RESPONSE_CACHE_TTL", "300")
        monkeypatch.setenv("RESPONSE_CACHE_TTL_PER_TYPE", '{"Stock": 5}')
        monkeypatch.setenv("RESPONSE_CACHE_IGNORED_TYPES", "Session, Token")
        monkeypatch.setenv("RESPONSE_CACHE_ENABLED", "false")

        settings = ResponseCacheSettings()

        assert settings.max_entries == 500
        assert settings.ttl == 300
        assert settings.ttl_per_type == {"Stock": 5}
        assert settings.ignored_types == {"Session", "Token"}
        assert settings.enabled is False

    def test_ignored_types_json_list(self, monkeypatch):
        """Test that ignored types also accept a JSON array."""
        monkeypatch.setenv("RESPONSE_CACHE_IGNORED_TYPES", '["Session", "Token"]')

        assert ResponseCacheSettings().ignored_types == {"Session", "Token"}

    def test_ignored_types_from_iterable(self):
        """Test constructing ignored types from a Python collection."""
        assert ResponseCacheSettings(ignored_types=["A", "A", "B"]).ignored_types == {"A", "B"}

    def test_loader_caches_until_cleared(self, monkeypatch):
        """Test that the loader returns one instance until the cache is cleared."""
        first = get_response_cache_settings()
        assert get_response_cache_settings() is first

        monkeypatch.setenv("RESPONSE_CACHE_TTL", "42")
        clear_settings_cache()

        assert get_response_cache_settings().ttl == 42


@pytest.mark.unit
class TestTtlForTypes:
    """Test effective TTL resolution."""

    def test_nothing_applies(self):
        """Test that no default and no override means no expiry."""
        assert ResponseCacheSettings().ttl_for_types({"User"}) is None

    def test_default_only(self):
        """Test that the default applies without overrides."""
        assert ResponseCacheSettings(ttl=60).ttl_for_types({"User"}) == 60

    def test_minimum_wins(self):
        """Test that the smallest matching TTL is chosen."""
        settings = ResponseCacheSettings(ttl=60, ttl_per_type={"User": 30, "Stock": 5, "Post": 90})

        assert settings.ttl_for_types({"User", "Stock"}) == 5
        assert settings.ttl_for_types({"Post"}) == 60
        assert settings.ttl_for_types(set()) == 60

    def test_override_without_default(self):
        """Test that an override bounds an otherwise unbounded cache."""
        settings = ResponseCacheSettings(ttl_per_type={"Stock": 5})

        assert settings.ttl_for_types({"Stock", "User"}) == 5
        assert settings.ttl_for_types({"User"}) is None


@pytest.mark.unit
class TestLoggingSettings:
    """Test suite for LoggingSettings."""

    def test_defaults(self):
        """Test LoggingSettings default values."""
        settings = LoggingSettings()

        assert settings.level == "INFO"
        assert settings.json_logs is True

    def test_level_normalized(self):
        """Test that lowercase levels are accepted."""
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_invalid_level(self):
        """Test that unknown levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")

    def test_to_logging_kwargs(self):
        """Test the kwargs handed to configure_logging."""
        kwargs = LoggingSettings(json_logs=False, service_name="svc").to_logging_kwargs()

        assert kwargs["json_logs"] is False
        assert kwargs["service_name"] == "svc"
        assert kwargs["log_level"] == "INFO"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("300", "300"),
        ("300  # five minutes", "300"),
        ("a#b", "a#b"),
        ("# all comment", ""),
    ],
)
def test_strip_inline_comment(raw, expected):
    """Test inline comment removal from env values."""
    assert strip_inline_comment(raw) == expected
