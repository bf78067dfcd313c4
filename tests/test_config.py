"""Settings validation tests."""

import pytest
from pydantic import ValidationError

from taskboard.config import DEFAULT_JWT_SECRET, Settings


def test_development_allows_default_secret(monkeypatch):
    monkeypatch.delenv("TASKBOARD_JWT_SECRET", raising=False)
    s = Settings(environment="development")
    assert s.jwt_secret == DEFAULT_JWT_SECRET


def test_production_rejects_default_secret(monkeypatch):
    monkeypatch.delenv("TASKBOARD_JWT_SECRET", raising=False)
    with pytest.raises(ValidationError):
        Settings(environment="production")


def test_production_accepts_real_secret():
    s = Settings(environment="production", jwt_secret="a-long-random-value")
    assert s.jwt_secret == "a-long-random-value"


def test_token_window_defaults_to_a_day(monkeypatch):
    monkeypatch.delenv("TASKBOARD_ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
    assert Settings().access_token_expire_minutes == 24 * 60


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("TASKBOARD_PORT", "9001")
    assert Settings().port == 9001


def test_sqlite_detection():
    assert Settings(database_url="sqlite+aiosqlite:///:memory:").is_sqlite
    assert not Settings(database_url="postgresql+asyncpg://u:p@h/db").is_sqlite
