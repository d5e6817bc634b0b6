from enum import Enum


class CloudProvider(str, Enum):
    """Cloud providers a user can connect and receive samples for."""
    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"
    DIGITALOCEAN = "digitalocean"


class MetricType(str, Enum):
    BILLING = "billing"
    CPU = "cpu"
    MEMORY = "memory"
    STORAGE = "storage"
    LATENCY = "latency"
    THROUGHPUT = "throughput"
    HEALTH = "health"


class AlertType(str, Enum):
    COST = "cost"
    CPU = "cpu"
    MEMORY = "memory"
    STORAGE = "storage"
    PERFORMANCE = "performance"
    HEALTH = "health"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


ALL_PROVIDERS = [p.value for p in CloudProvider]

# Named metric sets served by the per-provider series endpoints
BILLING_METRICS = (MetricType.BILLING.value,)
RESOURCE_METRICS = (MetricType.CPU.value, MetricType.MEMORY.value, MetricType.STORAGE.value)
PERFORMANCE_METRICS = (MetricType.LATENCY.value, MetricType.THROUGHPUT.value)

# Units used by the synthetic seeder
METRIC_UNITS = {
    MetricType.BILLING.value: "USD",
    MetricType.CPU.value: "%",
    MetricType.MEMORY.value: "%",
    MetricType.STORAGE.value: "%",
    MetricType.LATENCY.value: "ms",
    MetricType.THROUGHPUT.value: "req/s",
}
