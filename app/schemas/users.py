from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.shared.core.constants import Theme
from app.models.alert_settings import (
    DEFAULT_COST_THRESHOLD,
    DEFAULT_CPU_THRESHOLD,
    DEFAULT_MEMORY_THRESHOLD,
    DEFAULT_STORAGE_THRESHOLD,
)
from app.schemas.common import UTCDatetime


# ============================================================
# Auth
# ============================================================

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


# ============================================================
# Profile
# ============================================================

class UserResponse(BaseModel):
    """Public view of a user. The password hash is never included."""
    id: UUID
    name: str
    email: str
    theme: str
    created_at: UTCDatetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None


class PasswordUpdate(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


# ============================================================
# Alert thresholds
# ============================================================

class AlertThresholds(BaseModel):
    """
    Immutable per-request snapshot of a user's alert configuration.
    Defaults mirror the column defaults so a missing row evaluates identically.
    """
    version: int = 1
    cost_threshold: float = DEFAULT_COST_THRESHOLD
    cpu_threshold: float = DEFAULT_CPU_THRESHOLD
    memory_threshold: float = DEFAULT_MEMORY_THRESHOLD
    storage_threshold: float = DEFAULT_STORAGE_THRESHOLD
    notifications_enabled: bool = True

    model_config = ConfigDict(from_attributes=True, frozen=True)


class AlertThresholdsUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""
    cost_threshold: Optional[float] = Field(None, ge=0)
    cpu_threshold: Optional[float] = Field(None, ge=0, le=100)
    memory_threshold: Optional[float] = Field(None, ge=0, le=100)
    storage_threshold: Optional[float] = Field(None, ge=0, le=100)
    notifications_enabled: Optional[bool] = None


class SettingsUpdate(BaseModel):
    alert_settings: Optional[AlertThresholdsUpdate] = None
    theme: Optional[Theme] = None


class SettingsResponse(BaseModel):
    alert_settings: AlertThresholds
    theme: str


class UserStats(BaseModel):
    metrics_count: int
    alerts_count: int
    unresolved_alerts_count: int
    connected_providers_count: int
    connected_providers: List[str]
