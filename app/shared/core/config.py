from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator
from typing import Optional


class Settings(BaseSettings):
    """
    Main configuration for Nimbus.
    Uses Pydantic-Settings for environment variable parsing from .env.
    """
    APP_NAME: str = "Nimbus"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # local, development, staging, production
    TESTING: bool = False
    RATELIMIT_ENABLED: bool = True

    @model_validator(mode='after')
    def validate_security_config(self) -> 'Settings':
        """Ensure critical production keys are present and valid."""
        if self.TESTING:
            return self

        if self.is_production:
            if not self.JWT_SECRET or len(self.JWT_SECRET) < 32:
                raise ValueError("JWT_SECRET must be at least 32 characters in production.")

            if not self.ENCRYPTION_KEY or len(self.ENCRYPTION_KEY) < 32:
                raise ValueError("ENCRYPTION_KEY must be at least 32 characters in production.")

            if not self.DATABASE_URL:
                raise ValueError("DATABASE_URL is required in production.")

            if self.DB_SSL_MODE not in ["require", "verify-ca", "verify-full"]:
                raise ValueError(
                    f"SECURITY ERROR: DB_SSL_MODE must be 'require', 'verify-ca', or 'verify-full' in production. Current: {self.DB_SSL_MODE}"
                )

            if self.ENABLE_SEED_ENDPOINTS:
                import structlog
                structlog.get_logger().warning(
                    "seed_endpoints_enabled_in_production",
                    msg="ENABLE_SEED_ENDPOINTS should be False outside development"
                )

        return self

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./nimbus.db"
    DB_SSL_MODE: str = "disable"  # Options: disable, require, verify-ca, verify-full
    DB_SSL_CA_CERT_PATH: Optional[str] = None
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Auth (session tokens)
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    PASSWORD_MIN_LENGTH: int = 6
    BCRYPT_ROUNDS: int = 10

    # Credentials at rest
    ENCRYPTION_KEY: Optional[str] = None

    # Security
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Rate limiting storage (memory:// when unset)
    REDIS_URL: Optional[str] = None

    # Developer data utilities
    ENABLE_SEED_ENDPOINTS: bool = True

    # Aggregation windows
    SUMMARY_WINDOW_HOURS: int = 24
    DEFAULT_SERIES_DAYS: int = 7
    MAX_SERIES_DAYS: int = 365

    # Alert ledger listing
    ALERT_LIST_DEFAULT_LIMIT: int = 50
    ALERT_LIST_MAX_LIMIT: int = 200
    DASHBOARD_RECENT_ALERTS: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings():
    """Returns a singleton instance of the application settings."""
    return Settings()
