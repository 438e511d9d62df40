from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from techub.metrics.trend import TrendDirection


class AverageComparison(BaseModel):
    diff_percent: float
    label: str


class SLAItem(BaseModel):
    name: str
    inside: int
    outside: int
    total: int
    percentage: float
    previous_percentage: float | None
    variation: float
    trend: TrendDirection
    status: str  # green, yellow, red
    meta_excelente: float
    meta_atencao: float
    recorded_at: datetime
    average_comparison: AverageComparison | None = None
    active_alerts: list[str] = []


class SLAOverview(BaseModel):
    kind: str
    items: list[SLAItem]
    generated_at: datetime


class EvolutionPoint(BaseModel):
    day: date
    label: str
    closed: int
    inside: int
    percentage: float


class SLAMetaUpdate(BaseModel):
    meta_excelente: float = Field(ge=0, le=100)
    meta_atencao: float = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _check_order(self):
        if self.meta_atencao > self.meta_excelente:
            raise ValueError("meta_atencao must not exceed meta_excelente")
        return self


class SLAMetaResponse(BaseModel):
    identifier: str
    meta_excelente: float
    meta_atencao: float

    model_config = {"from_attributes": True}
