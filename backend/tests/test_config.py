"""Tests for settings used at startup: migration URL and production checks."""

import pytest

from app.config import Settings


@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgresql+asyncpg://u:p@db:5432/lift_log", "postgresql://u:p@db:5432/lift_log"),
        ("sqlite+aiosqlite:///tmp/lift.db", "sqlite:///tmp/lift.db"),
    ],
)
def test_sync_database_url(url, expected):
    assert Settings(_env_file=None, database_url=url).sync_database_url == expected


def test_production_requires_secret_key():
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        Settings(_env_file=None, app_env="production", secret_key="change-me-in-production").validate_production_config()


def test_production_sweep_must_be_shorter_than_minute_window():
    cfg = Settings(
        _env_file=None,
        app_env="production",
        secret_key="s3cret",
        rate_limit_cleanup_interval_seconds=60,
        generation_minute_window_seconds=60,
    )
    with pytest.raises(RuntimeError, match="RATE_LIMIT_CLEANUP_INTERVAL_SECONDS"):
        cfg.validate_production_config()


def test_development_skips_checks():
    Settings(_env_file=None, app_env="development").validate_production_config()
