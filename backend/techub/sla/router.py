from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techub.auth.service import SessionContext
from techub.database import get_db
from techub.dependencies import get_current_session, require_permission
from techub.sla.schemas import EvolutionPoint, SLAMetaResponse, SLAMetaUpdate, SLAOverview
from techub.sla.service import get_metas, get_sla_evolution, get_sla_overview, upsert_meta

router = APIRouter(prefix="/sla", tags=["sla"])

KIND_PATTERN = "^(fila|projeto)$"


@router.get("/metas", response_model=list[SLAMetaResponse])
async def list_metas(
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    metas = await get_metas(db)
    return [SLAMetaResponse.model_validate(m) for m in sorted(metas.values(), key=lambda m: m.identifier)]


@router.put("/metas/{identifier}", response_model=SLAMetaResponse)
async def save_meta(
    identifier: str,
    data: SLAMetaUpdate,
    context: SessionContext = Depends(require_permission("settings.sla")),
    db: AsyncSession = Depends(get_db),
):
    return SLAMetaResponse.model_validate(await upsert_meta(db, identifier, data))


@router.get("/{kind}", response_model=SLAOverview)
async def overview(
    kind: str = Path(pattern=KIND_PATTERN),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return SLAOverview(**await get_sla_overview(db, kind))


@router.get("/{kind}/evolution", response_model=list[EvolutionPoint])
async def evolution(
    kind: str = Path(pattern=KIND_PATTERN),
    name: str | None = Query(None),
    context: SessionContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return [EvolutionPoint(**p) for p in await get_sla_evolution(db, kind, name)]
