import uuid

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from techub.alerts.repository import AlertQuery, AlertRepository
from techub.alerts.schemas import (
    MONITORING_TYPE_PATTERN,
    AlertListResponse,
    AlertResolve,
    AlertResponse,
    AlertSettingsResponse,
    AlertSettingsUpdate,
    AlertSummary,
)
from techub.alerts.service import (
    get_alert_settings,
    resolve_alert,
    summarize_alerts,
    upsert_alert_settings,
)
from techub.auth.service import SessionContext
from techub.database import get_db
from techub.dependencies import get_current_session, require_permission

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertListResponse)
async def list_alerts(
    resolved: bool | None = Query(None),
    monitoring_type: str | None = Query(None, pattern=MONITORING_TYPE_PATTERN),
    severity: str | None = Query(None),
    alert_type: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    repo = AlertRepository(db)
    query = AlertQuery(
        monitoring_type=monitoring_type,
        severity=severity,
        alert_type=alert_type,
        resolved=resolved,
        search=search,
        limit=per_page,
        offset=(page - 1) * per_page,
    )
    items = await repo.find_in_range(query)
    total = await repo.count(query)
    return AlertListResponse(items=[AlertResponse.model_validate(a) for a in items], total=total)


@router.get("/summary", response_model=AlertSummary)
async def summary(
    monitoring_type: str | None = Query(None, pattern=MONITORING_TYPE_PATTERN),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    alerts = await AlertRepository(db).find_in_range(AlertQuery(monitoring_type=monitoring_type))
    return AlertSummary(**summarize_alerts(alerts))


@router.get("/settings/{monitoring_type}", response_model=AlertSettingsResponse)
async def read_settings(
    monitoring_type: str = Path(pattern=MONITORING_TYPE_PATTERN),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return AlertSettingsResponse.model_validate(await get_alert_settings(db, monitoring_type))


@router.put("/settings/{monitoring_type}", response_model=AlertSettingsResponse)
async def save_settings(
    data: AlertSettingsUpdate,
    monitoring_type: str = Path(pattern=MONITORING_TYPE_PATTERN),
    context: SessionContext = Depends(require_permission("settings.alerts")),
    db: AsyncSession = Depends(get_db),
):
    stored = await upsert_alert_settings(db, monitoring_type, data)
    return AlertSettingsResponse.model_validate(stored)


@router.get("/{alert_id}", response_model=AlertResponse)
async def get_alert(
    alert_id: uuid.UUID,
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    alert = await AlertRepository(db).get(alert_id)
    if not alert:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alerta não encontrado")
    return AlertResponse.model_validate(alert)


@router.post("/{alert_id}/resolve", response_model=AlertResponse)
async def resolve(
    alert_id: uuid.UUID,
    data: AlertResolve,
    context: SessionContext = Depends(require_permission("alerts.manage")),
    db: AsyncSession = Depends(get_db),
):
    repo = AlertRepository(db)
    alert = await repo.get(alert_id)
    if not alert:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alerta não encontrado")

    resolved = await resolve_alert(repo, alert, context.user.id, data.comment)
    if resolved is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Alerta já tratado")
    return AlertResponse.model_validate(resolved)
