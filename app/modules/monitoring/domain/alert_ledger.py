"""
Alert Ledger
Durable, owner-scoped record of triggered and resolved alerts.
"""
from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.alert import Alert
from app.shared.core.config import get_settings
from app.shared.core.constants import AlertSeverity, AlertType, CloudProvider
from app.shared.core.exceptions import ResourceNotFoundError, ValidationError
from app.shared.db.base import as_utc

logger = structlog.get_logger()

REQUIRED_FIELDS_MESSAGE = "Please provide all required fields"
NOT_FOUND_MESSAGE = "Alert not found"


def _absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _enum_value(enum_cls, value: str, field: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"Invalid {field}: {value}. Expected one of: {allowed}")


class AlertLedger:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        user_id: UUID,
        provider: Optional[str],
        alert_type: Optional[str],
        threshold: Optional[float],
        current_value: Optional[float],
        message: Optional[str],
        severity: Optional[str] = None,
    ) -> Alert:
        """
        Record a triggered alert.

        Raises:
            ValidationError when a required field is absent or an enum value is unknown.
        """
        required = {
            "provider": provider,
            "alert_type": alert_type,
            "threshold": threshold,
            "current_value": current_value,
            "message": message,
        }
        missing = [name for name, value in required.items() if _absent(value)]
        if missing:
            raise ValidationError(REQUIRED_FIELDS_MESSAGE, details={"missing": missing})

        alert = Alert(
            user_id=user_id,
            provider=_enum_value(CloudProvider, provider, "provider"),
            alert_type=_enum_value(AlertType, alert_type, "alert_type"),
            threshold=float(threshold),
            current_value=float(current_value),
            message=message.strip(),
            severity=_enum_value(AlertSeverity, severity or AlertSeverity.MEDIUM.value, "severity"),
            triggered=True,
            resolved=False,
            resolved_at=None,
        )
        self.db.add(alert)
        await self.db.commit()
        await self.db.refresh(alert)

        logger.info(
            "alert_created",
            user_id=str(user_id),
            alert_id=str(alert.id),
            alert_type=alert.alert_type,
            provider=alert.provider,
            severity=alert.severity,
        )
        return alert

    async def list(
        self,
        user_id: UUID,
        resolved: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[Alert]:
        """Newest-first alerts for one owner, optionally filtered by resolved state."""
        settings = get_settings()
        if limit is None:
            limit = settings.ALERT_LIST_DEFAULT_LIMIT
        limit = max(1, min(limit, settings.ALERT_LIST_MAX_LIMIT))

        stmt = select(Alert).where(Alert.user_id == user_id)
        if resolved is not None:
            stmt = stmt.where(Alert.resolved == resolved)
        stmt = stmt.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, user_id: UUID, alert_id: UUID) -> Alert:
        result = await self.db.execute(
            select(Alert).where(Alert.id == alert_id, Alert.user_id == user_id)
        )
        alert = result.scalar_one_or_none()
        if alert is None:
            raise ResourceNotFoundError(NOT_FOUND_MESSAGE)
        return alert

    async def resolve(self, user_id: UUID, alert_id: UUID) -> Alert:
        """
        Mark an owned alert resolved and stamp resolved_at.
        Resolving twice keeps the first resolution time.
        """
        alert = await self.get(user_id, alert_id)
        if alert.resolved and alert.resolved_at is not None:
            return alert

        now = datetime.now(timezone.utc)
        created_at = as_utc(alert.created_at)
        alert.resolved = True
        alert.resolved_at = max(now, created_at) if created_at else now
        await self.db.commit()
        await self.db.refresh(alert)

        logger.info("alert_resolved", user_id=str(user_id), alert_id=str(alert_id))
        return alert

    async def delete(self, user_id: UUID, alert_id: UUID) -> None:
        alert = await self.get(user_id, alert_id)
        await self.db.delete(alert)
        await self.db.commit()
        logger.info("alert_deleted", user_id=str(user_id), alert_id=str(alert_id))

    async def count(self, user_id: UUID, resolved: Optional[bool] = None) -> int:
        stmt = select(func.count(Alert.id)).where(Alert.user_id == user_id)
        if resolved is not None:
            stmt = stmt.where(Alert.resolved == resolved)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def has_open_alert(self, user_id: UUID, provider: str, alert_type: str) -> bool:
        result = await self.db.execute(
            select(func.count(Alert.id)).where(
                Alert.user_id == user_id,
                Alert.provider == provider,
                Alert.alert_type == alert_type,
                Alert.resolved.is_(False),
            )
        )
        return (result.scalar() or 0) > 0
