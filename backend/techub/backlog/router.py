from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.service import SessionContext
from techub.backlog.schemas import (
    AGE_RANGE_PATTERN,
    BacklogFilters,
    BacklogItemResponse,
    BacklogKPIs,
    BacklogListResponse,
    DailyTotalResponse,
    FlowPoint,
    HeatmapResponse,
)
from techub.backlog.service import (
    get_backlog_items,
    get_daily_history,
    get_filter_options,
    get_heatmap,
    get_kpis,
    get_open_backlog_series,
    get_operational_flow,
    record_daily_total,
)
from techub.database import get_db
from techub.dependencies import get_current_session
from techub.models.base import utcnow

router = APIRouter(prefix="/backlog", tags=["backlog"])


def backlog_filters(
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    project_code: list[str] = Query([]),
    company_name: list[str] = Query([]),
    queue: list[str] = Query([]),
    state: list[str] = Query([]),
    assigned_account: list[str] = Query([]),
    age_range: str | None = Query(None, pattern=AGE_RANGE_PATTERN),
    status_filter: list[str] = Query([], alias="status"),
    client_status: list[str] = Query([]),
    incident_type: list[str] = Query([]),
) -> BacklogFilters:
    return BacklogFilters(
        date_from=date_from,
        date_to=date_to,
        project_code=project_code,
        company_name=company_name,
        queue=queue,
        state=state,
        assigned_account=assigned_account,
        age_range=age_range,
        status=status_filter,
        client_status=client_status,
        incident_type=incident_type,
    )


@router.get("/items", response_model=BacklogListResponse)
async def list_items(
    filters: BacklogFilters = Depends(backlog_filters),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    items = await get_backlog_items(db, filters)
    return BacklogListResponse(
        items=[BacklogItemResponse.model_validate(i) for i in items],
        total=len(items),
        filter_options=await get_filter_options(db),
    )


@router.get("/kpis", response_model=BacklogKPIs)
async def kpis(
    filters: BacklogFilters = Depends(backlog_filters),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return BacklogKPIs(**await get_kpis(db, filters))


@router.post("/daily-totals", response_model=DailyTotalResponse, status_code=status.HTTP_201_CREATED)
async def snapshot_today(
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return DailyTotalResponse.model_validate(await record_daily_total(db))


@router.get("/daily-totals", response_model=list[DailyTotalResponse])
async def daily_totals(
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    date_to = date_to or utcnow().date()
    date_from = date_from or date_to - timedelta(days=4)
    if date_from > date_to:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Período inválido")
    return [DailyTotalResponse.model_validate(t) for t in await get_daily_history(db, date_from, date_to)]


@router.get("/flow", response_model=list[FlowPoint])
async def operational_flow(
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return [FlowPoint(**b.as_dict()) for b in await get_operational_flow(db)]


@router.get("/open-series", response_model=list[FlowPoint])
async def open_series(
    filters: BacklogFilters = Depends(backlog_filters),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return [FlowPoint(**b.as_dict()) for b in await get_open_backlog_series(db, filters)]


@router.get("/heatmap", response_model=HeatmapResponse)
async def heatmap(
    filters: BacklogFilters = Depends(backlog_filters),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    result = await get_heatmap(db, filters)
    return HeatmapResponse(columns=list(result.columns), rows=result.rows(), max_value=result.max_value)
