"""
Threshold Evaluator

Compares a latest sample against a user's thresholds and decides whether an
alert is warranted. Everything here is pure: no I/O, no clock, no state.

Severity policy (ratio = value / threshold, evaluated only on a breach):

    ratio <  1.10  -> medium
    ratio <  1.50  -> high
    ratio >= 1.50  -> critical
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from app.models.metric import MetricSample
from app.schemas.users import AlertThresholds
from app.shared.core.constants import AlertSeverity, AlertType, MetricType

HIGH_RATIO = 1.10
CRITICAL_RATIO = 1.50

# metric_type -> (alert_type, thresholds attribute)
THRESHOLD_RULES: Dict[str, Tuple[str, str]] = {
    MetricType.BILLING.value: (AlertType.COST.value, "cost_threshold"),
    MetricType.CPU.value: (AlertType.CPU.value, "cpu_threshold"),
    MetricType.MEMORY.value: (AlertType.MEMORY.value, "memory_threshold"),
    MetricType.STORAGE.value: (AlertType.STORAGE.value, "storage_threshold"),
}


@dataclass(frozen=True)
class AlertCandidate:
    """An alert the ledger could record. Not persisted by the evaluator."""
    provider: str
    alert_type: str
    threshold: float
    current_value: float
    severity: str
    message: str


def severity_for(value: float, threshold: float) -> str:
    """
    Total function from (value, threshold) to a severity tier.

    Values under the threshold still map to medium; callers decide whether a
    breach happened. A non-positive threshold is treated as maximally exceeded.
    """
    if threshold <= 0:
        return AlertSeverity.CRITICAL.value
    ratio = value / threshold
    if ratio < HIGH_RATIO:
        return AlertSeverity.MEDIUM.value
    if ratio < CRITICAL_RATIO:
        return AlertSeverity.HIGH.value
    return AlertSeverity.CRITICAL.value


_LABELS = {
    AlertType.COST.value: "Cost",
    AlertType.CPU.value: "CPU usage",
    AlertType.MEMORY.value: "Memory usage",
    AlertType.STORAGE.value: "Storage usage",
}


def _format_message(provider: str, alert_type: str, value: float, threshold: float, unit: str) -> str:
    label = _LABELS.get(alert_type, alert_type)
    if unit == "USD":
        return f"{label} on {provider} reached ${value:.2f}, at or above the ${threshold:.2f} threshold"
    return f"{label} on {provider} reached {value:.2f}{unit}, at or above the {threshold:.2f}{unit} threshold"


def evaluate(sample: MetricSample, thresholds: AlertThresholds) -> Optional[AlertCandidate]:
    """
    Return a candidate when the sample meets or exceeds its threshold.

    Metric types without a configured threshold (latency, throughput, health)
    never produce candidates, and a threshold of zero or less disables its rule.
    """
    rule = THRESHOLD_RULES.get(sample.metric_type)
    if rule is None:
        return None

    alert_type, attr = rule
    threshold = float(getattr(thresholds, attr))
    if threshold <= 0:
        return None

    value = float(sample.value)
    if value < threshold:
        return None

    return AlertCandidate(
        provider=sample.provider,
        alert_type=alert_type,
        threshold=threshold,
        current_value=value,
        severity=severity_for(value, threshold),
        message=_format_message(sample.provider, alert_type, value, threshold, sample.unit or ""),
    )
