"""
Metrics API

Dashboard summary, per-provider time series, ingestion and the
development-only seed/clear helpers. Every route is scoped to the caller.
"""

from typing import Annotated, Optional, Sequence

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.metric import MetricSample
from app.modules.monitoring.domain.aggregator import MetricsAggregator, normalize_provider, validate_days
from app.modules.monitoring.domain.alert_ledger import AlertLedger
from app.modules.monitoring.domain.sample_store import SampleStore
from app.modules.monitoring.domain.seeder import build_seed_samples
from app.schemas.alerts import AlertResponse
from app.schemas.common import ok
from app.schemas.metrics import DashboardData, MetricIngestRequest, MetricSampleResponse
from app.shared.core.auth import CurrentUser, get_current_user
from app.shared.core.config import get_settings
from app.shared.core.constants import BILLING_METRICS, PERFORMANCE_METRICS, RESOURCE_METRICS
from app.shared.core.exceptions import ResourceNotFoundError
from app.shared.core.logging import audit_log
from app.shared.core.rate_limit import seed_limit, standard_limit
from app.shared.db.base import utcnow
from app.shared.db.session import get_db

logger = structlog.get_logger()
router = APIRouter(tags=["Metrics"])


def _series_payload(samples: Sequence[MetricSample]) -> dict:
    data = [MetricSampleResponse.model_validate(s).model_dump(mode="json") for s in samples]
    return ok(data, count=len(data))


def _require_seeding_enabled() -> None:
    if not get_settings().ENABLE_SEED_ENDPOINTS:
        raise ResourceNotFoundError("Seeding is disabled")


@router.get("/dashboard")
async def get_dashboard(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    provider: Optional[str] = Query(default=None, description="aws, gcp, azure, digitalocean or all"),
):
    """
    Latest value per (provider, metric_type) over the last 24 hours,
    reduced to the four summary figures, plus the newest unresolved alerts.
    """
    summary, metrics = await MetricsAggregator.get_dashboard(db, current_user.id, provider)
    alerts = await AlertLedger(db).list(
        current_user.id,
        resolved=False,
        limit=get_settings().DASHBOARD_RECENT_ALERTS,
    )
    data = DashboardData(
        summary=summary,
        metrics=metrics,
        alerts=[AlertResponse.model_validate(a) for a in alerts],
    )
    return ok(data.model_dump(mode="json"))


@router.get("/{provider}/billing")
async def get_billing_series(
    provider: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    days: Optional[int] = Query(default=None),
):
    samples = await MetricsAggregator.get_series(
        db, current_user.id, provider, metric_types=BILLING_METRICS, days=days
    )
    return _series_payload(samples)


@router.get("/{provider}/resources")
async def get_resource_series(
    provider: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    days: Optional[int] = Query(default=None),
):
    samples = await MetricsAggregator.get_series(
        db, current_user.id, provider, metric_types=RESOURCE_METRICS, days=days
    )
    return _series_payload(samples)


@router.get("/{provider}/performance")
async def get_performance_series(
    provider: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    days: Optional[int] = Query(default=None),
):
    samples = await MetricsAggregator.get_series(
        db, current_user.id, provider, metric_types=PERFORMANCE_METRICS, days=days
    )
    return _series_payload(samples)


@router.get("/{provider}/all")
async def get_all_series(
    provider: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    days: Optional[int] = Query(default=None),
    metric_type: Optional[str] = Query(default=None, alias="type"),
):
    samples = await MetricsAggregator.get_series(
        db, current_user.id, provider, metric_type=metric_type, days=days
    )
    return _series_payload(samples)


@router.post("", status_code=status.HTTP_201_CREATED)
@standard_limit
async def ingest_metrics(
    request: Request,
    payload: MetricIngestRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """
    Append samples for the caller. The owner always comes from the session,
    never from the payload. Missing timestamps default to the ingestion instant.
    """
    received_at = utcnow()
    samples = [
        MetricSample(
            user_id=current_user.id,
            provider=item.provider.value,
            metric_type=item.metric_type.value,
            value=item.value,
            unit=item.unit,
            resource_id=item.resource_id,
            resource_name=item.resource_name,
            timestamp=item.timestamp or received_at,
        )
        for item in payload.samples
    ]
    inserted = await SampleStore(db).insert_many(samples)
    return ok(message="Metrics recorded", count=inserted)


@router.post("/seed", status_code=status.HTTP_201_CREATED)
@seed_limit
async def seed_metrics(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    days: Optional[int] = Query(default=None),
    provider: Optional[str] = Query(default=None),
):
    """
    Generate synthetic samples for the trailing window. Appends only.
    """
    _require_seeding_enabled()
    days = validate_days(get_settings().DEFAULT_SERIES_DAYS if days is None else days)
    provider_value = normalize_provider(provider)

    samples = build_seed_samples(
        current_user.id,
        providers=[provider_value] if provider_value else None,
        days=days,
    )
    inserted = await SampleStore(db).insert_many(samples)

    logger.info("metrics_seeded", user_id=str(current_user.id), count=inserted, days=days)
    return ok(message="Sample data created successfully", count=inserted)


@router.delete("/clear")
async def clear_metrics(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    """Delete every sample owned by the caller."""
    _require_seeding_enabled()
    removed = await SampleStore(db).delete_all(current_user.id)
    audit_log("metrics_cleared", str(current_user.id), {"deleted_count": removed})
    return ok(message="All metrics cleared", deleted_count=removed)
