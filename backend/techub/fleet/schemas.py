from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from techub.metrics.trend import TrendDirection
from techub.sla.schemas import AverageComparison


class FleetReadingCreate(BaseModel):
    company: str = Field(min_length=1, max_length=255)
    total_base: int = Field(ge=0)
    total_unmonitored: int = Field(ge=0)
    recorded_at: datetime | None = None

    @field_validator("company")
    @classmethod
    def _company_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("company must not be blank")
        return value


class CompanyMonitoring(BaseModel):
    company: str
    total_base: int
    total_unmonitored: int
    monitored: int
    percentage: float
    trend: TrendDirection
    variation: float
    recorded_at: datetime
    average_comparison: AverageComparison | None = None
    active_alerts: list[str] = []


class MonitoringDataResponse(BaseModel):
    success: bool = True
    data: list[CompanyMonitoring]


class HistoryPoint(BaseModel):
    key: str
    label: str
    recorded_at: datetime
    total_base: int
    total_unmonitored: int
    percentage: float
