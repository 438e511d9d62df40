from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

AGE_RANGE_PATTERN = "^(ate3|4a5|6a10|11a30|31a50|acima50)$"


class BacklogFilters(BaseModel):
    date_from: date | None = None
    date_to: date | None = None
    project_code: list[str] = []
    company_name: list[str] = []
    queue: list[str] = []
    state: list[str] = []
    assigned_account: list[str] = []
    age_range: str | None = Field(None, pattern=AGE_RANGE_PATTERN)
    status: list[str] = []
    client_status: list[str] = []
    incident_type: list[str] = []


class BacklogItemResponse(BaseModel):
    id: UUID
    reference: str | None
    queue: str | None
    status: str | None
    project_name: str | None
    project_code: str | None
    company_name: str | None
    client_status: str | None
    opened_at: datetime | None
    days_open: int | None
    incident_type: str | None
    state: str | None
    city: str | None
    assigned_account: str | None

    model_config = {"from_attributes": True}


class BacklogListResponse(BaseModel):
    items: list[BacklogItemResponse]
    total: int
    filter_options: dict[str, list[str]]


class ProjectCount(BaseModel):
    project: str
    count: int


class BacklogKPIs(BaseModel):
    total_backlog: int
    above_30: int
    above_50: int
    average_age: int
    top_projects: list[ProjectCount]
    yesterday_total: int | None
    delta_abs: int | None
    delta_pct: int | None
    from_snapshot: bool


class DailyTotalResponse(BaseModel):
    data_ref: date
    total_backlog: int
    above_30: int
    above_50: int
    average_age: float

    model_config = {"from_attributes": True}


class FlowPoint(BaseModel):
    day: date
    label: str
    opened: int
    closed: int
    cumulative: int


class HeatmapCell(BaseModel):
    range: str
    count: int
    tier: int


class HeatmapRow(BaseModel):
    category: str
    cells: list[HeatmapCell]
    total: int


class HeatmapResponse(BaseModel):
    columns: list[str]
    rows: list[HeatmapRow]
    max_value: int
