"""Tests for configuration settings."""

import pytest
from pydantic import ValidationError

from replydesk.core.config import Settings


def test_timing_defaults() -> None:
    """Polling, auto-send pacing and notice lifetime defaults."""
    settings = Settings(_env_file=None)

    assert settings.POLL_INTERVAL_SECONDS == 5.0
    assert settings.AUTO_SEND_DELAY_SECONDS == 0.8
    assert settings.NOTIFICATION_TTL_SECONDS == 3.0
    assert settings.ARCHIVE_INTERVAL_SECONDS == 60


def test_table_names_default() -> None:
    settings = Settings(_env_file=None)

    assert settings.MESSAGES_TABLE == "support_messages"
    assert settings.HISTORY_TABLE == "customer_history"


def test_api_base_url_trailing_slash_dropped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://replydesk.internal:5000/")

    assert Settings(_env_file=None).API_BASE_URL == "http://replydesk.internal:5000"


def test_invalid_url_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "ftp://nope")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_negative_delay_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTO_SEND_DELAY_SECONDS", "-1")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_cors_origins_list(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

    assert Settings(_env_file=None).cors_origins_list == ["http://a.test", "http://b.test"]


def test_validate_startup_with_all_secrets(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test validate_startup passes when all required secrets are set."""
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")

    settings = Settings(_env_file=None)
    settings.validate_startup()
    assert settings.is_configured


def test_validate_startup_with_missing_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test validate_startup fails when the service key is missing."""
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "")

    settings = Settings(_env_file=None)
    with pytest.raises(ValueError, match="SUPABASE_SERVICE_ROLE_KEY"):
        settings.validate_startup()
