"""
Synthetic sample generator for development environments.

Seeding only appends. It is not transactional with clearing, so a concurrent
seed and clear for the same user may interleave and leave a partial set.
"""
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence
from uuid import UUID

from app.models.metric import MetricSample
from app.shared.core.constants import ALL_PROVIDERS, METRIC_UNITS, MetricType

# metric_type -> (low, high) bounds of the uniform draw
SEED_RANGES = {
    MetricType.BILLING.value: (100.0, 600.0),
    MetricType.CPU.value: (40.0, 80.0),
    MetricType.MEMORY.value: (50.0, 80.0),
    MetricType.STORAGE.value: (60.0, 80.0),
    MetricType.LATENCY.value: (50.0, 150.0),
    MetricType.THROUGHPUT.value: (500.0, 1500.0),
}

SAMPLES_PER_PROVIDER_DAY = len(SEED_RANGES)

# Billing lands at the start of the day, utilisation and performance at noon
BILLING_HOUR = 0
USAGE_HOUR = 12


def build_seed_samples(
    user_id: UUID,
    providers: Optional[Sequence[str]] = None,
    days: int = 7,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[MetricSample]:
    """
    Build `len(providers) * 6 * days` samples for the trailing `days` days.
    """
    providers = list(providers) if providers else list(ALL_PROVIDERS)
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()

    samples: List[MetricSample] = []
    for offset in range(days):
        day = (now - timedelta(days=offset)).replace(hour=0, minute=0, second=0, microsecond=0)
        for provider in providers:
            for metric_type, (low, high) in SEED_RANGES.items():
                hour = BILLING_HOUR if metric_type == MetricType.BILLING.value else USAGE_HOUR
                samples.append(
                    MetricSample(
                        user_id=user_id,
                        provider=provider,
                        metric_type=metric_type,
                        value=round(rng.uniform(low, high), 2),
                        unit=METRIC_UNITS[metric_type],
                        resource_id="",
                        resource_name="",
                        timestamp=day.replace(hour=hour),
                    )
                )
    return samples
