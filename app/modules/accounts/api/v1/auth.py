"""
Auth API

Signup, login and the current session. Tokens are stateless, so logout
only tells the client to drop its copy.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.modules.accounts.domain.users import UserService
from app.schemas.common import ok
from app.schemas.users import LoginRequest, SignupRequest, UserResponse
from app.shared.core.auth import CurrentUser, get_current_user
from app.shared.core.rate_limit import auth_limit
from app.shared.db.session import get_db

logger = structlog.get_logger()
router = APIRouter(tags=["Auth"])


def _session_payload(user, token: str) -> dict:
    return {
        "user": UserResponse.model_validate(user).model_dump(mode="json"),
        "token": token,
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
@auth_limit
async def signup(
    request: Request,
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db),
):
    user, token = await UserService(db).signup(payload.name, payload.email, payload.password)
    return ok(_session_payload(user, token), message="Account created")


@router.post("/login")
@auth_limit
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user, token = await UserService(db).login(payload.email, payload.password)
    return ok(_session_payload(user, token))


@router.post("/logout")
async def logout():
    return ok(message="Logged out successfully")


@router.get("/me")
async def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).get(current_user.id)
    return ok(UserResponse.model_validate(user).model_dump(mode="json"))
