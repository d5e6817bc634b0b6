from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import UTCDatetime


class AlertCreate(BaseModel):
    """
    Request body for creating an alert.

    Required fields are declared optional here so a missing field surfaces as
    the ledger's own validation message instead of a schema error.
    """
    provider: Optional[str] = None
    alert_type: Optional[str] = None
    threshold: Optional[float] = None
    current_value: Optional[float] = None
    message: Optional[str] = Field(None, max_length=2000)
    severity: Optional[str] = None


class AlertResponse(BaseModel):
    id: UUID
    provider: str
    alert_type: str
    threshold: float
    current_value: float
    message: str
    severity: str
    triggered: bool
    resolved: bool
    created_at: UTCDatetime
    resolved_at: Optional[UTCDatetime] = None

    model_config = ConfigDict(from_attributes=True)


class AlertCandidateResponse(BaseModel):
    provider: str
    alert_type: str
    threshold: float
    current_value: float
    severity: str
    message: str


class EvaluationResponse(BaseModel):
    """Outcome of one explicit evaluation pass."""
    settings_version: int
    candidates: List[AlertCandidateResponse]
    created: List[AlertResponse]
    skipped_existing: int
    recorded: bool
