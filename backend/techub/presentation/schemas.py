from pydantic import BaseModel, Field, model_validator

PRESENTATION_TYPE_PATTERN = "^(mps|sla_fila|sla_projeto)$"


class PresentationSettingsBase(BaseModel):
    companies_per_page: int = Field(4, ge=1, le=50)
    interval_seconds: int = Field(10, ge=3, le=3600)
    min_percentage: float | None = Field(None, ge=0, le=100)
    max_percentage: float | None = Field(None, ge=0, le=100)
    ignore_green: bool = False
    ignore_yellow: bool = False
    ignore_red: bool = False
    threshold_excellent: float = Field(98.0, ge=0, le=100)
    threshold_attention: float = Field(80.0, ge=0, le=100)

    @model_validator(mode="after")
    def _check_ranges(self):
        if self.min_percentage is not None and self.max_percentage is not None:
            if self.min_percentage > self.max_percentage:
                raise ValueError("min_percentage must not exceed max_percentage")
        if self.threshold_attention > self.threshold_excellent:
            raise ValueError("threshold_attention must not exceed threshold_excellent")
        return self


class PresentationSettingsUpdate(PresentationSettingsBase):
    pass


class PresentationSettingsResponse(PresentationSettingsBase):
    monitoring_type: str

    model_config = {"from_attributes": True}


class PresentationItem(BaseModel):
    name: str
    percentage: float
    status: str


class PresentationPages(BaseModel):
    monitoring_type: str
    interval_seconds: int
    total_items: int
    pages: list[list[PresentationItem]]
