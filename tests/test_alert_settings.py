import pytest
from pydantic import ValidationError as PydanticValidationError

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.accounts.domain.settings import AlertSettingsService
from app.schemas.users import AlertThresholds, AlertThresholdsUpdate


@pytest.mark.asyncio
async def test_missing_row_yields_defaults_without_writing(db: AsyncSession, user):
    service = AlertSettingsService(db)

    thresholds = await service.get_thresholds(user.id)

    assert thresholds == AlertThresholds()
    assert thresholds.cost_threshold == 1000.0
    assert thresholds.storage_threshold == 90.0
    assert await service._get_row(user.id) is None


@pytest.mark.asyncio
async def test_update_bumps_version_and_keeps_other_fields(db: AsyncSession, user):
    service = AlertSettingsService(db)

    updated = await service.update(user.id, AlertThresholdsUpdate(cpu_threshold=65.0))
    again = await service.update(user.id, AlertThresholdsUpdate(cost_threshold=250.0))

    assert updated.version == 2
    assert again.version == 3
    assert again.cpu_threshold == 65.0
    assert again.cost_threshold == 250.0
    assert again.memory_threshold == 80.0


@pytest.mark.asyncio
async def test_empty_update_does_not_bump_version(db: AsyncSession, user):
    service = AlertSettingsService(db)
    result = await service.update(user.id, AlertThresholdsUpdate())
    assert result.version == 1


def test_snapshot_is_immutable():
    thresholds = AlertThresholds()
    with pytest.raises(PydanticValidationError):
        thresholds.cpu_threshold = 10.0


def test_percentage_thresholds_are_bounded():
    with pytest.raises(PydanticValidationError):
        AlertThresholdsUpdate(cpu_threshold=150.0)
