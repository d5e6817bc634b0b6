"""
Metric Sample Schemas - ingestion, series and dashboard payloads
"""

from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from app.shared.core.constants import CloudProvider, MetricType
from app.schemas.common import UTCDatetime
from app.schemas.alerts import AlertResponse


class MetricSampleCreate(BaseModel):
    """One sample submitted for ingestion. The owner is always the caller."""
    provider: CloudProvider
    metric_type: MetricType
    value: float
    unit: str = Field(..., min_length=1, max_length=20)
    resource_id: str = Field(default="", max_length=255)
    resource_name: str = Field(default="", max_length=255)
    timestamp: Optional[UTCDatetime] = Field(None, description="Defaults to the ingestion instant")


class MetricIngestRequest(BaseModel):
    samples: List[MetricSampleCreate] = Field(..., min_length=1, max_length=10000)


class MetricSampleResponse(BaseModel):
    id: UUID
    provider: str
    metric_type: str
    value: float
    unit: str
    resource_id: str
    resource_name: str
    timestamp: UTCDatetime

    model_config = ConfigDict(from_attributes=True)


class LatestMetric(BaseModel):
    """Newest sample of one (provider, metric_type) group."""
    provider: str
    metric_type: str
    value: float
    unit: str
    timestamp: UTCDatetime


class DashboardSummary(BaseModel):
    """Reduced dashboard figures, each rendered to two decimals."""
    total_billing: str
    avg_cpu: str
    avg_memory: str
    avg_storage: str


class DashboardData(BaseModel):
    summary: DashboardSummary
    metrics: List[LatestMetric]
    alerts: List[AlertResponse] = Field(default_factory=list)
