"""
Alert Evaluation Pipeline

Optional stage that connects the Threshold Evaluator to the Alert Ledger.
It only runs when a caller asks for it; nothing schedules it.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.alert import Alert
from app.modules.accounts.domain.settings import AlertSettingsService
from app.modules.monitoring.domain.aggregator import MetricsAggregator
from app.modules.monitoring.domain.alert_ledger import AlertLedger
from app.modules.monitoring.domain.thresholds import AlertCandidate, evaluate

logger = structlog.get_logger()


@dataclass
class EvaluationResult:
    settings_version: int
    candidates: List[AlertCandidate] = field(default_factory=list)
    created: List[Alert] = field(default_factory=list)
    skipped_existing: int = 0
    recorded: bool = False


class AlertEvaluationPipeline:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = AlertLedger(db)

    async def evaluate_and_record(
        self,
        user_id: UUID,
        provider: Optional[str] = None,
        dry_run: bool = False,
        now: Optional[datetime] = None,
    ) -> EvaluationResult:
        """
        Evaluate the latest sample of every group against the user's thresholds.

        Candidates are recorded only when notifications are enabled and this
        is not a dry run. A candidate is skipped when an unresolved alert for
        the same (provider, alert_type) already exists.
        """
        thresholds = await AlertSettingsService(self.db).get_thresholds(user_id)
        latest = await MetricsAggregator.latest_metrics(self.db, user_id, provider, now)

        result = EvaluationResult(settings_version=thresholds.version)
        for key in sorted(latest):
            candidate = evaluate(latest[key], thresholds)
            if candidate is not None:
                result.candidates.append(candidate)

        result.recorded = thresholds.notifications_enabled and not dry_run
        if not result.recorded:
            logger.info(
                "alert_evaluation_not_recorded",
                user_id=str(user_id),
                candidates=len(result.candidates),
                dry_run=dry_run,
                notifications_enabled=thresholds.notifications_enabled,
            )
            return result

        for candidate in result.candidates:
            if await self.ledger.has_open_alert(user_id, candidate.provider, candidate.alert_type):
                result.skipped_existing += 1
                continue
            alert = await self.ledger.create(
                user_id,
                provider=candidate.provider,
                alert_type=candidate.alert_type,
                threshold=candidate.threshold,
                current_value=candidate.current_value,
                message=candidate.message,
                severity=candidate.severity,
            )
            result.created.append(alert)

        logger.info(
            "alert_evaluation_recorded",
            user_id=str(user_id),
            settings_version=thresholds.version,
            candidates=len(result.candidates),
            created=len(result.created),
            skipped_existing=result.skipped_existing,
        )
        return result
