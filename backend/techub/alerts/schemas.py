from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

MONITORING_TYPE_PATTERN = "^(mps|sla_fila|sla_projeto)$"


class AlertRequest(BaseModel):
    """A prospective alert handed to the deduplication gate."""

    monitoring_type: str = Field(pattern=MONITORING_TYPE_PATTERN)
    subject: str = Field(min_length=1, max_length=255)
    alert_type: str = Field(pattern="^(limite|tendencia|anomalia)$")
    severity: str = Field(pattern="^(critical|warning|info)$")
    current_percentage: float
    context: dict | None = None


class AlertResponse(BaseModel):
    id: UUID
    monitoring_type: str
    subject: str
    alert_type: str
    severity: str
    current_percentage: float
    context: dict | None
    detected_at: datetime
    resolved: bool
    resolved_at: datetime | None
    resolved_by: UUID | None
    resolution_comment: str | None

    model_config = {"from_attributes": True}


class AlertListResponse(BaseModel):
    items: list[AlertResponse]
    total: int


class AlertResolve(BaseModel):
    comment: str = Field(min_length=1, max_length=2000)


class AlertSummary(BaseModel):
    active: int
    critical: int
    by_type: dict[str, int]
    resolved_today: int
    avg_response_minutes: int


class AlertSettingsBase(BaseModel):
    anomaly_enabled: bool = True
    anomaly_moving_avg_days: int = Field(7, ge=2, le=90)
    anomaly_stddev_multiplier: float = Field(2.0, gt=0, le=10)
    trend_enabled: bool = True
    trend_consecutive_periods: int = Field(3, ge=1, le=30)


class AlertSettingsUpdate(AlertSettingsBase):
    pass


class AlertSettingsResponse(AlertSettingsBase):
    monitoring_type: str

    model_config = {"from_attributes": True}
