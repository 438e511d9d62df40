from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techub.alerts.evaluation import evaluate_reading, raise_alerts
from techub.alerts.repository import AlertQuery, AlertRepository
from techub.alerts.schemas import AlertSettingsResponse
from techub.alerts.service import get_alert_settings
from techub.config import settings
from techub.metrics.bucketing import count_by_day, days_between
from techub.metrics.statistics import compare_to_average
from techub.metrics.trend import classify_trend
from techub.models.base import ensure_utc, utcnow
from techub.sla.models import SLAMeta, SLASnapshot, SLATicket
from techub.sla.schemas import SLAMetaUpdate

logger = structlog.get_logger()

MONITORING_TYPES = {"fila": "sla_fila", "projeto": "sla_projeto"}


@dataclass(frozen=True)
class SLAReading:
    name: str
    inside: int
    outside: int
    recorded_at: datetime

    @property
    def total(self) -> int:
        return self.inside + self.outside

    @property
    def percentage(self) -> float:
        # nothing measured yet means nothing was lost
        if self.total == 0:
            return 100.0
        return round(self.inside / self.total * 100, 2)


def status_color(percentage: float, meta_excelente: float, meta_atencao: float) -> str:
    if percentage >= meta_excelente:
        return "green"
    if percentage >= meta_atencao:
        return "yellow"
    return "red"


async def get_metas(db: AsyncSession) -> dict[str, SLAMeta]:
    result = await db.execute(select(SLAMeta))
    return {m.identifier: m for m in result.scalars().all()}


async def upsert_meta(db: AsyncSession, identifier: str, data: SLAMetaUpdate) -> SLAMeta:
    result = await db.execute(select(SLAMeta).where(SLAMeta.identifier == identifier))
    meta = result.scalar_one_or_none()
    if meta is None:
        meta = SLAMeta(identifier=identifier)
        db.add(meta)
    meta.meta_excelente = data.meta_excelente
    meta.meta_atencao = data.meta_atencao
    await db.commit()
    await db.refresh(meta)
    logger.info("sla_meta_saved", identifier=identifier)
    return meta


async def _readings_by_name(db: AsyncSession, kind: str) -> dict[str, list[SLAReading]]:
    """Every snapshot of the kind grouped per name, oldest first."""
    result = await db.execute(
        select(SLASnapshot)
        .where(SLASnapshot.kind == kind)
        .order_by(SLASnapshot.name.asc(), SLASnapshot.recorded_at.asc())
    )
    grouped: dict[str, list[SLAReading]] = {}
    for snap in result.scalars().all():
        grouped.setdefault(snap.name, []).append(
            SLAReading(snap.name, snap.inside, snap.outside, ensure_utc(snap.recorded_at))
        )
    return grouped


async def get_sla_overview(
    db: AsyncSession,
    kind: str,
    now: datetime | None = None,
    evaluate: bool = True,
) -> dict:
    """Latest SLA standing per queue or project, raising alerts for bad readings.

    Alert persistence never fails the overview; the gate swallows its own errors.
    """
    now = now or utcnow()
    monitoring_type = MONITORING_TYPES[kind]
    grouped = await _readings_by_name(db, kind)
    metas = await get_metas(db)
    # detached copy: a failed alert insert rolls back and expires ORM state
    alert_settings = AlertSettingsResponse.model_validate(await get_alert_settings(db, monitoring_type))

    rows = []
    for name, readings in grouped.items():
        latest = readings[-1]
        history = [r.percentage for r in readings[:-1]]
        previous = history[-1] if history else None
        meta = metas.get(name)
        meta_excelente = meta.meta_excelente if meta else settings.DEFAULT_META_EXCELENTE
        meta_atencao = meta.meta_atencao if meta else settings.DEFAULT_META_ATENCAO
        rows.append({
            "name": name,
            "inside": latest.inside,
            "outside": latest.outside,
            "total": latest.total,
            "percentage": latest.percentage,
            "previous_percentage": previous,
            "variation": round(latest.percentage - previous, 2) if previous is not None else 0.0,
            "trend": classify_trend(latest.percentage, previous),
            "status": status_color(latest.percentage, meta_excelente, meta_atencao),
            "meta_excelente": meta_excelente,
            "meta_atencao": meta_atencao,
            "recorded_at": latest.recorded_at,
            "average_comparison": compare_to_average(latest.percentage, history),
            "_history": history,
        })

    repo = AlertRepository(db)
    if evaluate:
        for row in rows:
            try:
                requests = evaluate_reading(
                    monitoring_type,
                    row["name"],
                    row["percentage"],
                    row["_history"],
                    row["meta_atencao"],
                    alert_settings,
                )
            except Exception:
                logger.exception("alert_evaluation_failed", monitoring_type=monitoring_type, subject=row["name"])
                continue
            await raise_alerts(repo, requests, now=now)

    active = await repo.find_in_range(AlertQuery(monitoring_type=monitoring_type, resolved=False))
    alerts_by_subject: dict[str, set[str]] = {}
    for alert in active:
        alerts_by_subject.setdefault(alert.subject, set()).add(alert.alert_type)

    items = []
    for row in rows:
        row.pop("_history")
        row["active_alerts"] = sorted(alerts_by_subject.get(row["name"], ()))
        items.append(row)
    return {"kind": kind, "items": items, "generated_at": now}


def _ticket_column(kind: str):
    return SLATicket.queue if kind == "fila" else SLATicket.project_name


async def get_sla_evolution(
    db: AsyncSession,
    kind: str,
    name: str | None = None,
    today: date | None = None,
) -> list[dict]:
    """Month-to-date cumulative SLA percentage of closed tickets, one point per day."""
    today = today or utcnow().date()
    start = today.replace(day=1)
    range_start = datetime.combine(start, time.min, tzinfo=timezone.utc)
    range_end = datetime.combine(today + timedelta(days=1), time.min, tzinfo=timezone.utc)

    query = select(SLATicket.closed_at, SLATicket.sla_lost).where(
        SLATicket.closed_at.isnot(None),
        SLATicket.closed_at >= range_start,
        SLATicket.closed_at < range_end,
    )
    if name:
        query = query.where(_ticket_column(kind) == name)
    rows = (await db.execute(query)).all()

    closed_per_day = count_by_day(r.closed_at for r in rows)
    inside_per_day = count_by_day(r.closed_at for r in rows if not r.sla_lost)

    points = []
    closed = inside = 0
    for day in days_between(start, today):
        closed += closed_per_day.get(day, 0)
        inside += inside_per_day.get(day, 0)
        points.append({
            "day": day,
            "label": day.strftime("%d/%m"),
            "closed": closed,
            "inside": inside,
            "percentage": round(inside / closed * 100, 2) if closed else 100.0,
        })
    return points
