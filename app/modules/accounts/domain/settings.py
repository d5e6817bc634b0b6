"""
Per-user alert threshold configuration.

Rows are created lazily with explicit defaults and loaded once per request
into an immutable AlertThresholds snapshot.
"""
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.alert_settings import AlertSettings
from app.schemas.users import AlertThresholds, AlertThresholdsUpdate

logger = structlog.get_logger()


class AlertSettingsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self, user_id: UUID) -> AlertSettings | None:
        result = await self.db.execute(
            select(AlertSettings).where(AlertSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: UUID) -> AlertSettings:
        row = await self._get_row(user_id)
        if row is None:
            row = AlertSettings(user_id=user_id, version=1)
            self.db.add(row)
            await self.db.commit()
            await self.db.refresh(row)
            logger.info("alert_settings_created", user_id=str(user_id))
        return row

    async def get_thresholds(self, user_id: UUID) -> AlertThresholds:
        """
        Snapshot of the user's thresholds. A missing row yields the defaults
        without writing anything.
        """
        row = await self._get_row(user_id)
        if row is None:
            return AlertThresholds()
        return AlertThresholds.model_validate(row)

    async def update(self, user_id: UUID, data: AlertThresholdsUpdate) -> AlertThresholds:
        row = await self.get_or_create(user_id)
        changes = data.model_dump(exclude_none=True)
        if changes:
            for key, value in changes.items():
                setattr(row, key, value)
            row.version = (row.version or 1) + 1
            await self.db.commit()
            await self.db.refresh(row)
            logger.info(
                "alert_settings_updated",
                user_id=str(user_id),
                version=row.version,
                fields=sorted(changes),
            )
        return AlertThresholds.model_validate(row)
