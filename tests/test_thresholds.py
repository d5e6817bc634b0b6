import pytest
from uuid import UUID

from app.modules.monitoring.domain.thresholds import evaluate, severity_for
from app.schemas.users import AlertThresholds
from conftest import make_sample

UID = UUID(int=7)


@pytest.mark.parametrize(
    "value, threshold, expected",
    [
        (100, 100, "medium"),
        (105, 100, "medium"),
        (109.99, 100, "medium"),
        (110, 100, "high"),
        (149.99, 100, "high"),
        (150, 100, "critical"),
        (1000, 100, "critical"),
    ],
)
def test_severity_breakpoints(value, threshold, expected):
    assert severity_for(value, threshold) == expected


def test_cpu_breach_produces_candidate():
    candidate = evaluate(make_sample(UID, metric_type="cpu", value=92.0), AlertThresholds())

    assert candidate is not None
    assert candidate.alert_type == "cpu"
    assert candidate.provider == "aws"
    assert candidate.threshold == 80.0
    assert candidate.current_value == 92.0
    assert candidate.severity == "high"
    assert "CPU usage on aws" in candidate.message


def test_billing_maps_to_cost_alert():
    thresholds = AlertThresholds(cost_threshold=200.0)
    candidate = evaluate(make_sample(UID, metric_type="billing", value=450.0), thresholds)

    assert candidate.alert_type == "cost"
    assert candidate.severity == "critical"
    assert "$450.00" in candidate.message


def test_value_equal_to_threshold_triggers():
    candidate = evaluate(make_sample(UID, metric_type="storage", value=90.0), AlertThresholds())
    assert candidate is not None
    assert candidate.severity == "medium"


def test_below_threshold_returns_none():
    assert evaluate(make_sample(UID, metric_type="memory", value=79.99), AlertThresholds()) is None


@pytest.mark.parametrize("metric_type", ["latency", "throughput", "health"])
def test_unmapped_metric_types_never_alert(metric_type):
    assert evaluate(make_sample(UID, metric_type=metric_type, value=1e9), AlertThresholds()) is None


def test_non_positive_threshold_disables_rule():
    thresholds = AlertThresholds(cpu_threshold=0)
    assert evaluate(make_sample(UID, metric_type="cpu", value=99.0), thresholds) is None


def test_evaluate_is_idempotent():
    sample = make_sample(UID, metric_type="memory", value=95.0)
    thresholds = AlertThresholds()
    assert evaluate(sample, thresholds) == evaluate(sample, thresholds)
