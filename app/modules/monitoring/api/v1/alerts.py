"""
Alerts API

Owner-scoped alert ledger plus the explicit evaluation pass.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.modules.monitoring.domain.alert_ledger import NOT_FOUND_MESSAGE, AlertLedger
from app.modules.monitoring.domain.pipeline import AlertEvaluationPipeline
from app.schemas.alerts import AlertCandidateResponse, AlertCreate, AlertResponse, EvaluationResponse
from app.schemas.common import ok
from app.shared.core.auth import CurrentUser, get_current_user
from app.shared.core.exceptions import ResourceNotFoundError
from app.shared.core.logging import audit_log
from app.shared.db.session import get_db

logger = structlog.get_logger()
router = APIRouter(tags=["Alerts"])


def parse_alert_id(alert_id: str) -> UUID:
    # Malformed ids answer the same as unknown ones
    try:
        return UUID(alert_id)
    except ValueError:
        raise ResourceNotFoundError(NOT_FOUND_MESSAGE)


def _alert_json(alert) -> dict:
    return AlertResponse.model_validate(alert).model_dump(mode="json")


@router.get("")
async def list_alerts(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    resolved: Optional[bool] = Query(default=None),
    limit: Optional[int] = Query(default=None),
):
    """Newest-first alerts, optionally filtered by resolved state."""
    alerts = await AlertLedger(db).list(current_user.id, resolved=resolved, limit=limit)
    data = [_alert_json(a) for a in alerts]
    return ok(data, count=len(data))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_alert(
    payload: AlertCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
):
    alert = await AlertLedger(db).create(
        current_user.id,
        provider=payload.provider,
        alert_type=payload.alert_type,
        threshold=payload.threshold,
        current_value=payload.current_value,
        message=payload.message,
        severity=payload.severity,
    )
    return ok(_alert_json(alert))


@router.put("/{alert_id}/resolve")
async def resolve_alert(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    alert_id: UUID = Depends(parse_alert_id),
    db: AsyncSession = Depends(get_db),
):
    alert = await AlertLedger(db).resolve(current_user.id, alert_id)
    audit_log("alert_resolved", str(current_user.id), {"alert_id": str(alert_id)})
    return ok(_alert_json(alert))


@router.delete("/{alert_id}")
async def delete_alert(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    alert_id: UUID = Depends(parse_alert_id),
    db: AsyncSession = Depends(get_db),
):
    await AlertLedger(db).delete(current_user.id, alert_id)
    audit_log("alert_deleted", str(current_user.id), {"alert_id": str(alert_id)})
    return ok(message="Alert deleted successfully")


@router.post("/evaluate")
async def evaluate_alerts(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
    provider: Optional[str] = Query(default=None),
    dry_run: bool = Query(default=False),
):
    """
    Evaluate the latest samples against the caller's thresholds.

    With dry_run the candidates are returned but nothing is recorded.
    """
    result = await AlertEvaluationPipeline(db).evaluate_and_record(
        current_user.id, provider=provider, dry_run=dry_run
    )
    data = EvaluationResponse(
        settings_version=result.settings_version,
        candidates=[
            AlertCandidateResponse(
                provider=c.provider,
                alert_type=c.alert_type,
                threshold=c.threshold,
                current_value=c.current_value,
                severity=c.severity,
                message=c.message,
            )
            for c in result.candidates
        ],
        created=[AlertResponse.model_validate(a) for a in result.created],
        skipped_existing=result.skipped_existing,
        recorded=result.recorded,
    )
    return ok(data.model_dump(mode="json"))
