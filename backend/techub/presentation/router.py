from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.service import SessionContext
from techub.database import get_db
from techub.dependencies import get_current_session, require_permission
from techub.fleet.service import get_monitoring_data
from techub.presentation.schemas import (
    PRESENTATION_TYPE_PATTERN,
    PresentationPages,
    PresentationSettingsResponse,
    PresentationSettingsUpdate,
)
from techub.presentation.service import get_settings, paginate_for_presentation, upsert_settings
from techub.sla.service import get_sla_overview

router = APIRouter(prefix="/presentation", tags=["presentation"])


@router.get("/settings/{monitoring_type}", response_model=PresentationSettingsResponse)
async def read_settings(
    monitoring_type: str = Path(pattern=PRESENTATION_TYPE_PATTERN),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return PresentationSettingsResponse.model_validate(await get_settings(db, monitoring_type))


@router.put("/settings/{monitoring_type}", response_model=PresentationSettingsResponse)
async def save_settings(
    data: PresentationSettingsUpdate,
    monitoring_type: str = Path(pattern=PRESENTATION_TYPE_PATTERN),
    context: SessionContext = Depends(require_permission("settings.presentation")),
    db: AsyncSession = Depends(get_db),
):
    return PresentationSettingsResponse.model_validate(await upsert_settings(db, monitoring_type, data))


@router.get("/{monitoring_type}/pages", response_model=PresentationPages)
async def pages(
    monitoring_type: str = Path(pattern=PRESENTATION_TYPE_PATTERN),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    config = PresentationSettingsResponse.model_validate(await get_settings(db, monitoring_type))

    # display only; alerts are raised by the dashboards and the refresh loop
    if monitoring_type == "mps":
        rows = await get_monitoring_data(db, evaluate=False)
        items = [{"name": r["company"], "percentage": r["percentage"]} for r in rows]
    else:
        kind = "fila" if monitoring_type == "sla_fila" else "projeto"
        overview = await get_sla_overview(db, kind, evaluate=False)
        items = [{"name": r["name"], "percentage": r["percentage"]} for r in overview["items"]]

    visible_pages = paginate_for_presentation(items, config)
    return PresentationPages(
        monitoring_type=monitoring_type,
        interval_seconds=config.interval_seconds,
        total_items=sum(len(p) for p in visible_pages),
        pages=visible_pages,
    )
