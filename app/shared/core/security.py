from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt
import structlog

from app.shared.core.config import get_settings
from app.shared.core.exceptions import ConfigurationError

logger = structlog.get_logger()

_DEV_ENCRYPTION_KEY = "nimbus-development-only-encryption-key"


# ============================================================================
# Password hashing
# ============================================================================

def hash_password(plain: str) -> str:
    """One-way bcrypt hash of a plaintext password."""
    settings = get_settings()
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        logger.warning("password_hash_malformed")
        return False


# ============================================================================
# Session tokens
# ============================================================================

def create_access_token(user_id: UUID, expires_minutes: int | None = None) -> str:
    """
    Issue a signed session token for a user.

    Claims:
    - sub: user id
    - aud: configured audience ("authenticated")
    - iat / exp: issue and expiry instants (UTC)
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    lifetime = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# ============================================================================
# Encryption key for credentials at rest
# ============================================================================

def get_encryption_key() -> str:
    """
    Key used by StringEncryptedType columns.
    Resolved lazily so importing models never requires the key.
    """
    settings = get_settings()
    if settings.ENCRYPTION_KEY:
        return settings.ENCRYPTION_KEY
    if settings.is_production:
        raise ConfigurationError("ENCRYPTION_KEY not set. Cannot store credentials securely.")
    logger.warning(
        "encryption_key_dev_fallback",
        warning="Using a development encryption key. Set ENCRYPTION_KEY outside development.",
    )
    return _DEV_ENCRYPTION_KEY
