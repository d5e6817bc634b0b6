from .domain.sample_store import SampleStore
from .domain.aggregator import MetricsAggregator
from .domain.alert_ledger import AlertLedger

__all__ = ["SampleStore", "MetricsAggregator", "AlertLedger"]
