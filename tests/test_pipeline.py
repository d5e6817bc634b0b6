import pytest
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.accounts.domain.settings import AlertSettingsService
from app.modules.monitoring.domain.alert_ledger import AlertLedger
from app.modules.monitoring.domain.pipeline import AlertEvaluationPipeline
from app.modules.monitoring.domain.sample_store import SampleStore
from app.schemas.users import AlertThresholdsUpdate
from conftest import NOW, make_sample


async def _seed_breaches(db, user_id):
    await SampleStore(db).insert_many([
        make_sample(user_id, metric_type="cpu", value=95.0, timestamp=NOW - timedelta(hours=1)),
        make_sample(user_id, metric_type="memory", value=20.0, timestamp=NOW - timedelta(hours=1)),
        make_sample(user_id, metric_type="billing", value=1600.0, timestamp=NOW - timedelta(hours=2)),
        make_sample(user_id, metric_type="latency", value=900.0, timestamp=NOW - timedelta(hours=1)),
    ])


@pytest.mark.asyncio
async def test_records_one_alert_per_breach(db: AsyncSession, user):
    await _seed_breaches(db, user.id)

    result = await AlertEvaluationPipeline(db).evaluate_and_record(user.id, now=NOW)

    assert result.recorded is True
    assert result.settings_version == 1
    assert sorted(c.alert_type for c in result.candidates) == ["cost", "cpu"]
    assert len(result.created) == 2
    severities = {a.alert_type: a.severity for a in result.created}
    assert severities == {"cpu": "high", "cost": "critical"}


@pytest.mark.asyncio
async def test_does_not_duplicate_open_alerts(db: AsyncSession, user):
    await _seed_breaches(db, user.id)
    pipeline = AlertEvaluationPipeline(db)

    await pipeline.evaluate_and_record(user.id, now=NOW)
    second = await pipeline.evaluate_and_record(user.id, now=NOW)

    assert second.created == []
    assert second.skipped_existing == 2
    assert await AlertLedger(db).count(user.id) == 2


@pytest.mark.asyncio
async def test_resolved_alert_can_trigger_again(db: AsyncSession, user):
    await _seed_breaches(db, user.id)
    pipeline = AlertEvaluationPipeline(db)
    ledger = AlertLedger(db)

    first = await pipeline.evaluate_and_record(user.id, now=NOW)
    for alert in first.created:
        await ledger.resolve(user.id, alert.id)

    second = await pipeline.evaluate_and_record(user.id, now=NOW)
    assert len(second.created) == 2


@pytest.mark.asyncio
async def test_dry_run_records_nothing(db: AsyncSession, user):
    await _seed_breaches(db, user.id)

    result = await AlertEvaluationPipeline(db).evaluate_and_record(user.id, dry_run=True, now=NOW)

    assert len(result.candidates) == 2
    assert result.recorded is False
    assert await AlertLedger(db).count(user.id) == 0


@pytest.mark.asyncio
async def test_notifications_disabled_records_nothing(db: AsyncSession, user):
    await _seed_breaches(db, user.id)
    await AlertSettingsService(db).update(user.id, AlertThresholdsUpdate(notifications_enabled=False))

    result = await AlertEvaluationPipeline(db).evaluate_and_record(user.id, now=NOW)

    assert result.recorded is False
    assert result.settings_version == 2
    assert await AlertLedger(db).count(user.id) == 0


@pytest.mark.asyncio
async def test_uses_updated_thresholds(db: AsyncSession, user):
    await _seed_breaches(db, user.id)
    await AlertSettingsService(db).update(
        user.id, AlertThresholdsUpdate(cpu_threshold=99.0, memory_threshold=10.0)
    )

    result = await AlertEvaluationPipeline(db).evaluate_and_record(user.id, dry_run=True, now=NOW)

    assert sorted(c.alert_type for c in result.candidates) == ["cost", "memory"]


@pytest.mark.asyncio
async def test_samples_outside_window_are_ignored(db: AsyncSession, user):
    await SampleStore(db).insert_many([
        make_sample(user.id, metric_type="cpu", value=99.0, timestamp=NOW - timedelta(hours=25)),
    ])

    result = await AlertEvaluationPipeline(db).evaluate_and_record(user.id, now=NOW)

    assert result.candidates == []
    assert result.created == []
