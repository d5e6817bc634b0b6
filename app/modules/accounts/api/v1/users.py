"""
User Settings API

Profile, password, alert thresholds, theme, cloud connections and
account statistics for the signed-in user.
"""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.modules.accounts.domain.connections import ConnectionService
from app.modules.accounts.domain.settings import AlertSettingsService
from app.modules.accounts.domain.users import UserService
from app.schemas.common import ok
from app.schemas.users import (
    AlertThresholds,
    PasswordUpdate,
    ProfileUpdate,
    SettingsResponse,
    SettingsUpdate,
    UserResponse,
)
from app.shared.core.auth import CurrentUser, get_current_user
from app.shared.db.session import get_db

logger = structlog.get_logger()
router = APIRouter(tags=["Users"])


# ============================================================
# Profile
# ============================================================

@router.get("/profile")
async def get_profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).get(current_user.id)
    return ok(UserResponse.model_validate(user).model_dump(mode="json"))


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).update_profile(
        current_user.id, name=payload.name, email=payload.email
    )
    return ok(UserResponse.model_validate(user).model_dump(mode="json"))


@router.put("/password")
async def change_password(
    payload: PasswordUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    await UserService(db).change_password(
        current_user.id, payload.current_password, payload.new_password
    )
    return ok(message="Password updated successfully")


# ============================================================
# Settings
# ============================================================

@router.get("/settings")
async def get_settings_view(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """
    Alert thresholds and theme. Creates default thresholds if none exist.
    """
    row = await AlertSettingsService(db).get_or_create(current_user.id)
    user = await UserService(db).get(current_user.id)
    data = SettingsResponse(alert_settings=AlertThresholds.model_validate(row), theme=user.theme)
    return ok(data.model_dump(mode="json"))


@router.put("/settings")
async def update_settings(
    payload: SettingsUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    service = AlertSettingsService(db)
    if payload.alert_settings is not None:
        thresholds = await service.update(current_user.id, payload.alert_settings)
    else:
        thresholds = await service.get_thresholds(current_user.id)

    users = UserService(db)
    if payload.theme is not None:
        user = await users.set_theme(current_user.id, payload.theme)
    else:
        user = await users.get(current_user.id)

    logger.info("user_settings_updated", user_id=str(current_user.id), version=thresholds.version)
    data = SettingsResponse(alert_settings=thresholds, theme=user.theme)
    return ok(data.model_dump(mode="json"))


# ============================================================
# Cloud connections
# ============================================================

@router.get("/connections")
async def list_connections(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    connections = await ConnectionService(db).list(current_user.id)
    data = [c.model_dump(mode="json") for c in connections]
    return ok(data, count=len(data))


@router.put("/connections/{provider}")
async def save_connection(
    provider: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    payload: Dict[str, Any] = Body(...),
):
    """
    Store credentials for one provider. Secrets are encrypted and never echoed back.
    """
    connection = await ConnectionService(db).upsert(current_user.id, provider, payload)
    return ok(connection.model_dump(mode="json"), message="Connection saved")


@router.delete("/connections/{provider}")
async def delete_connection(
    provider: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    await ConnectionService(db).disconnect(current_user.id, provider)
    return ok(message="Connection removed")


@router.get("/stats")
async def get_stats(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    stats = await UserService(db).stats(current_user.id)
    return ok(stats.model_dump(mode="json"))
