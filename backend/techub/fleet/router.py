from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.service import SessionContext
from techub.database import get_db
from techub.dependencies import get_current_session
from techub.fleet.schemas import CompanyMonitoring, FleetReadingCreate, HistoryPoint, MonitoringDataResponse
from techub.fleet.service import get_monitoring_data, get_reading_history, record_reading

router = APIRouter(prefix="/monitoring-data", tags=["fleet"])


@router.get("", response_model=MonitoringDataResponse)
async def monitoring_data(
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_monitoring_data(db)
    return MonitoringDataResponse(data=[CompanyMonitoring(**r) for r in rows])


@router.post("/readings", status_code=status.HTTP_201_CREATED)
async def add_reading(
    data: FleetReadingCreate,
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    reading = await record_reading(db, data)
    return {"id": str(reading.id), "company": reading.company}


@router.get("/{company}/history", response_model=list[HistoryPoint])
async def history(
    company: str,
    granularity: str = Query("daily", pattern="^(daily|hourly)$"),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return [HistoryPoint(**p) for p in await get_reading_history(db, company, granularity)]
