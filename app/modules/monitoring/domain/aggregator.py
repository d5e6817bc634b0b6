from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.metric import MetricSample
from app.modules.monitoring.domain.sample_store import SampleStore
from app.schemas.metrics import DashboardSummary, LatestMetric
from app.shared.core.config import get_settings
from app.shared.core.constants import CloudProvider, MetricType
from app.shared.core.exceptions import ValidationError
from app.shared.db.base import as_utc

logger = structlog.get_logger()

GroupKey = Tuple[str, str]


def window_start(days: float = 0, hours: float = 0, now: Optional[datetime] = None) -> datetime:
    """
    Start of a trailing window: a rolling instant `now - span`.
    Deliberately not aligned to midnight.
    """
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days, hours=hours)


def latest_per_group(samples: Iterable[MetricSample]) -> Dict[GroupKey, MetricSample]:
    """
    Select the newest sample for every (provider, metric_type) present.

    Samples are sorted newest-first with the id as secondary key, and the
    first one seen per group wins, so equal timestamps resolve the same way
    on every run.
    """
    ordered = sorted(
        samples,
        key=lambda s: (as_utc(s.timestamp), str(s.id)),
        reverse=True,
    )
    latest: Dict[GroupKey, MetricSample] = {}
    for sample in ordered:
        latest.setdefault((sample.provider, sample.metric_type), sample)
    return latest


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def summarize(latest: Iterable[MetricSample]) -> DashboardSummary:
    """Reduce latest-per-group samples into the four dashboard figures."""
    by_type: Dict[str, List[float]] = {}
    for sample in latest:
        by_type.setdefault(sample.metric_type, []).append(sample.value)

    total_billing = sum(by_type.get(MetricType.BILLING.value, []))
    return DashboardSummary(
        total_billing=f"{total_billing:.2f}",
        avg_cpu=f"{_mean(by_type.get(MetricType.CPU.value, [])):.2f}",
        avg_memory=f"{_mean(by_type.get(MetricType.MEMORY.value, [])):.2f}",
        avg_storage=f"{_mean(by_type.get(MetricType.STORAGE.value, [])):.2f}",
    )


def normalize_provider(provider: Optional[str], allow_all: bool = True) -> Optional[str]:
    """Validate a provider filter; "all" (or nothing) means no filter."""
    if provider is None or provider == "":
        return None
    value = provider.lower()
    if allow_all and value == "all":
        return None
    try:
        return CloudProvider(value).value
    except ValueError:
        raise ValidationError(f"Unsupported provider: {provider}")


def validate_days(days: int) -> int:
    settings = get_settings()
    if days < 1 or days > settings.MAX_SERIES_DAYS:
        raise ValidationError(f"days must be between 1 and {settings.MAX_SERIES_DAYS}")
    return days


class MetricsAggregator:
    """Read-path reductions over the Sample Store. Computed on demand per request."""

    @staticmethod
    async def latest_metrics(
        db: AsyncSession,
        user_id: UUID,
        provider: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[GroupKey, MetricSample]:
        settings = get_settings()
        since = window_start(hours=settings.SUMMARY_WINDOW_HOURS, now=now)
        samples = await SampleStore(db).query(
            user_id,
            provider=normalize_provider(provider),
            from_time=since,
            descending=True,
        )
        return latest_per_group(samples)

    @staticmethod
    async def get_dashboard(
        db: AsyncSession,
        user_id: UUID,
        provider: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[DashboardSummary, List[LatestMetric]]:
        """
        Dashboard figures from the latest sample per group in the trailing window.
        """
        latest = await MetricsAggregator.latest_metrics(db, user_id, provider, now)
        summary = summarize(latest.values())

        metrics = [
            LatestMetric(
                provider=s.provider,
                metric_type=s.metric_type,
                value=s.value,
                unit=s.unit,
                timestamp=s.timestamp,
            )
            for (_, _), s in sorted(latest.items())
        ]

        logger.info(
            "dashboard_summary_computed",
            user_id=str(user_id),
            provider=provider or "all",
            groups=len(metrics),
        )
        return summary, metrics

    @staticmethod
    async def get_series(
        db: AsyncSession,
        user_id: UUID,
        provider: str,
        metric_types: Optional[Sequence[str]] = None,
        metric_type: Optional[str] = None,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[MetricSample]:
        """
        Unreduced samples for charting, ascending by timestamp.
        Calendar-day bucketing is left to the consumer.
        """
        settings = get_settings()
        days = validate_days(settings.DEFAULT_SERIES_DAYS if days is None else days)
        provider_value = normalize_provider(provider, allow_all=False)
        if provider_value is None:
            raise ValidationError("provider is required")

        if metric_type is not None:
            try:
                metric_type = MetricType(metric_type).value
            except ValueError:
                raise ValidationError(f"Unsupported metric type: {metric_type}")

        return await SampleStore(db).query(
            user_id,
            provider=provider_value,
            metric_type=metric_type,
            metric_types=metric_types,
            from_time=window_start(days=days, now=now),
        )
