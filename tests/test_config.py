import pytest
from pydantic import ValidationError

from musicbox.config import Settings

SECRET = "x" * 32


def _settings(**overrides):
    values = {"DATABASE_URL": "sqlite://", "JWT_SECRET_KEY": SECRET, "ENVIRONMENT": "staging"}
    values.update(overrides)
    return Settings(**values)


def test_structured_views():
    settings = _settings(AZURE_STORAGE_CONTAINER="audio", STREAM_URL_TTL_MINUTES=15, ALGORITHM="rs256")

    assert settings.database.url == "sqlite://"
    assert settings.auth.algorithm == "RS256"
    assert settings.storage.container == "audio"
    assert settings.storage.stream_url_ttl_minutes == 15
    assert settings.app.environment == "staging"


def test_short_secret_is_rejected():
    with pytest.raises(ValidationError):
        _settings(JWT_SECRET_KEY="short").auth


def test_unsupported_database_url_is_rejected():
    with pytest.raises(ValidationError):
        _settings(DATABASE_URL="mysql://localhost/music").database


def test_frontend_origin_allowed_in_production():
    settings = _settings(ENVIRONMENT="Production", FRONTEND_URL="https://music.example.com")

    assert settings.is_production
    assert "https://music.example.com" in settings.cors_origins
    assert "https://music.example.com" not in _settings().cors_origins
