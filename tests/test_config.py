"""
Configuration tests.
"""

import pytest

from clearfund.config import Settings, get_settings


def test_get_settings_returns_settings() -> None:
    """get_settings returns a Settings instance."""
    settings = get_settings()
    assert isinstance(settings, Settings)


def test_settings_has_required_attributes() -> None:
    """Settings has all required attributes."""
    settings = get_settings()
    assert hasattr(settings, "app_name")
    assert hasattr(settings, "database_url")
    assert hasattr(settings, "internal_job_token")
    assert hasattr(settings, "score_update_max_retries")
    assert settings.app_name == "ClearFund"


def test_transparency_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Engine settings default to 3 retries, 15 deadline days, leaderboard page of 10."""
    monkeypatch.delenv("SCORE_UPDATE_MAX_RETRIES", raising=False)
    monkeypatch.delenv("EVIDENCE_DEADLINE_DAYS_DEFAULT", raising=False)
    monkeypatch.delenv("LEADERBOARD_PAGE_SIZE", raising=False)
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.score_update_max_retries == 3
        assert settings.evidence_deadline_days_default == 15
        assert settings.leaderboard_page_size == 10
    finally:
        get_settings.cache_clear()


def test_transparency_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Engine settings load from env."""
    monkeypatch.setenv("SCORE_UPDATE_MAX_RETRIES", "5")
    monkeypatch.setenv("EVIDENCE_DEADLINE_DAYS_DEFAULT", "30")
    monkeypatch.setenv("LEADERBOARD_PAGE_SIZE", "25")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.score_update_max_retries == 5
        assert settings.evidence_deadline_days_default == 30
        assert settings.leaderboard_page_size == 25
    finally:
        get_settings.cache_clear()


def test_max_retries_never_below_one(monkeypatch: pytest.MonkeyPatch) -> None:
    """A zero or negative retry setting still allows one attempt."""
    monkeypatch.setenv("SCORE_UPDATE_MAX_RETRIES", "0")
    get_settings.cache_clear()
    try:
        assert get_settings().score_update_max_retries == 1
    finally:
        get_settings.cache_clear()


def test_generic_postgresql_url_uses_psycopg(monkeypatch: pytest.MonkeyPatch) -> None:
    """postgresql:// URLs are rewritten to the psycopg3 driver."""
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/clearfund_dev")
    get_settings.cache_clear()
    try:
        assert get_settings().database_url == "postgresql+psycopg://u:p@db:5432/clearfund_dev"
    finally:
        get_settings.cache_clear()


def test_sqlite_url_kept_as_is(monkeypatch: pytest.MonkeyPatch) -> None:
    """sqlite URLs pass through unchanged."""
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./local.db")
    get_settings.cache_clear()
    try:
        assert get_settings().database_url == "sqlite:///./local.db"
    finally:
        get_settings.cache_clear()
