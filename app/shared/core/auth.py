import jwt
from typing import Optional
from uuid import UUID
from fastapi import HTTPException, Depends, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
import structlog
from app.shared.core.config import get_settings
from sqlalchemy.ext.asyncio import AsyncSession
from app.shared.db.session import get_db
from app.models.user import User

logger = structlog.get_logger()

# HTTPBearer: Extracts "Bearer <token>" from Authorization header
# auto_error=False: Returns None instead of 403 if no token, so we answer 401 ourselves
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """
    Represents the authenticated user resolved from the session token.
    """
    id: UUID
    email: str
    name: str


def decode_jwt(token: str) -> dict:
    """
    Decode and verify a Nimbus session token.

    Security:
    - Signature checked with JWT_SECRET and the configured algorithm
    - Rejects expired tokens automatically
    - Audience must match JWT_AUDIENCE

    Raises:
        HTTPException 401 if token is invalid
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        return payload

    except jwt.ExpiredSignatureError:
        logger.warning("jwt_expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        logger.warning("jwt_invalid", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
        )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> CurrentUser:
    """
    JWT + DB lookup. For protected routes.
    A token for a deleted account is rejected.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_jwt(credentials.credentials)
    user_id = payload.get("sub")

    try:
        user_uuid = UUID(user_id) if user_id else None
    except ValueError:
        user_uuid = None
    if user_uuid is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    user = await db.get(User, user_uuid)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    # Store in request state for downstream rate limiting
    request.state.user_id = user.id

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    logger.debug("user_authenticated", user_id=str(user.id))

    return CurrentUser(id=user.id, email=user.email, name=user.name)
