"""
Sample Store
Append-only persistence for metric samples, always scoped by owner.
"""
from datetime import datetime
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.metric import MetricSample

logger = structlog.get_logger()


class SampleStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_many(self, samples: Iterable[MetricSample]) -> int:
        """Bulk-append samples. No deduplication; prior rows are untouched."""
        batch = list(samples)
        if not batch:
            return 0
        self.db.add_all(batch)
        await self.db.commit()
        logger.info("metric_samples_inserted", count=len(batch))
        return len(batch)

    async def query(
        self,
        user_id: UUID,
        provider: Optional[str] = None,
        metric_type: Optional[str] = None,
        metric_types: Optional[Sequence[str]] = None,
        from_time: Optional[datetime] = None,
        to_time: Optional[datetime] = None,
        descending: bool = False,
    ) -> List[MetricSample]:
        """
        Return every matching sample for one owner ordered by timestamp.

        `from_time` is inclusive, `to_time` exclusive. `metric_type` and
        `metric_types` may be combined; both must match.
        """
        stmt = select(MetricSample).where(MetricSample.user_id == user_id)

        if provider:
            stmt = stmt.where(MetricSample.provider == provider)
        if metric_type:
            stmt = stmt.where(MetricSample.metric_type == metric_type)
        if metric_types:
            stmt = stmt.where(MetricSample.metric_type.in_(list(metric_types)))
        if from_time is not None:
            stmt = stmt.where(MetricSample.timestamp >= from_time)
        if to_time is not None:
            stmt = stmt.where(MetricSample.timestamp < to_time)

        if descending:
            stmt = stmt.order_by(MetricSample.timestamp.desc(), MetricSample.id.desc())
        else:
            stmt = stmt.order_by(MetricSample.timestamp.asc(), MetricSample.id.asc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def delete_all(self, user_id: UUID) -> int:
        """Remove every sample owned by `user_id`. Returns the number removed."""
        result = await self.db.execute(
            delete(MetricSample).where(MetricSample.user_id == user_id)
        )
        await self.db.commit()
        removed = result.rowcount or 0
        logger.info("metric_samples_cleared", user_id=str(user_id), count=removed)
        return removed

    async def count(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(MetricSample.id)).where(MetricSample.user_id == user_id)
        )
        return result.scalar() or 0
