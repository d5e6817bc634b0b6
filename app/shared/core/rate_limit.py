"""
Rate Limiting for Nimbus

Provides API rate limiting using slowapi (built on the limits library).
Storage is Redis when REDIS_URL is set, process memory otherwise.
Decorated endpoints must accept a `request: Request` argument.
"""

import hashlib

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from app.schemas.common import fail
from app.shared.core.config import get_settings

logger = structlog.get_logger()

def context_aware_key(request: Request) -> str:
    """
    Identifies the requester for rate limiting.
    1. Uses user_id if the request is already authenticated.
    2. Falls back to a hash of the bearer token (prevents NAT collisions).
    3. Falls back to remote IP.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
        # Hash rather than decode so forged tokens with a shared sub do not pool
        token_hash = hashlib.sha256(token.encode()).hexdigest()[:16]
        return f"token:{token_hash}"

    return get_remote_address(request)

_limiter = None

def get_limiter() -> Limiter:
    """Lazy initialization of the Limiter instance."""
    global _limiter
    if _limiter is None:
        settings = get_settings()
        storage_uri = settings.REDIS_URL or "memory://"
        _limiter = Limiter(
            key_func=context_aware_key,
            storage_uri=storage_uri,
            strategy="fixed-window",
            enabled=settings.RATELIMIT_ENABLED and not settings.TESTING,
        )
    return _limiter

async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return JSONResponse(
        status_code=429,
        content=fail(f"Rate limit exceeded: {exc.detail}"),
    )

def setup_rate_limiting(app: FastAPI) -> None:
    """
    Configure rate limiting for the FastAPI application.
    """
    limiter = get_limiter()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    logger.info("rate_limiting_configured", enabled=limiter.enabled)

# Rate limit decorators for use in routes
def rate_limit(limit: str = "100/minute"):
    """Decorator to apply rate limiting to an endpoint."""
    if get_settings().TESTING:
        return lambda x: x
    return get_limiter().limit(limit)

STANDARD_LIMIT = "100/minute"
AUTH_LIMIT = "30/minute"
SEED_LIMIT = "10/minute"

def _make_limit_decorator(limit_str: str):
    """Creates a decorator that applies the given rate limit."""
    def decorator(func):
        return rate_limit(limit_str)(func)
    return decorator

# Usage: @auth_limit (as decorator, no parentheses)
standard_limit = _make_limit_decorator(STANDARD_LIMIT)
auth_limit = _make_limit_decorator(AUTH_LIMIT)
seed_limit = _make_limit_decorator(SEED_LIMIT)
