import pytest
from pydantic import ValidationError

from app.shared.core.config import Settings

STRONG = "x" * 32


def _production(**overrides):
    values = {
        "TESTING": False,
        "ENVIRONMENT": "production",
        "JWT_SECRET": STRONG,
        "ENCRYPTION_KEY": STRONG,
        "DATABASE_URL": "postgresql+asyncpg://nimbus@db/nimbus",
        "DB_SSL_MODE": "require",
        "ENABLE_SEED_ENDPOINTS": False,
    }
    values.update(overrides)
    return values


def test_production_settings_accepted():
    settings = Settings(**_production())
    assert settings.is_production is True


def test_production_requires_long_jwt_secret():
    with pytest.raises(ValidationError, match="JWT_SECRET must be at least 32 characters"):
        Settings(**_production(JWT_SECRET="short"))


def test_production_requires_encryption_key():
    with pytest.raises(ValidationError, match="ENCRYPTION_KEY must be at least 32 characters"):
        Settings(**_production(ENCRYPTION_KEY="too-short"))


def test_production_requires_db_ssl():
    with pytest.raises(ValidationError, match="DB_SSL_MODE"):
        Settings(**_production(DB_SSL_MODE="disable"))


def test_development_is_lenient():
    """Development mode accepts weak secrets and no SSL."""
    settings = Settings(TESTING=False, ENVIRONMENT="development", JWT_SECRET="short", ENCRYPTION_KEY=None)
    assert settings.is_production is False


def test_aggregation_defaults():
    settings = Settings()
    assert settings.SUMMARY_WINDOW_HOURS == 24
    assert settings.DEFAULT_SERIES_DAYS == 7
    assert settings.MAX_SERIES_DAYS == 365
    assert settings.ALERT_LIST_DEFAULT_LIMIT == 50
    assert settings.ALERT_LIST_MAX_LIMIT == 200
