from datetime import datetime, timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techub.alerts.evaluation import evaluate_reading, raise_alerts
from techub.alerts.repository import AlertQuery, AlertRepository
from techub.alerts.schemas import AlertSettingsResponse
from techub.alerts.service import get_alert_settings
from techub.config import settings
from techub.fleet.models import FleetReading
from techub.fleet.schemas import FleetReadingCreate
from techub.metrics.bucketing import DAILY, HOURLY, period_key, period_label
from techub.metrics.statistics import compare_to_average
from techub.metrics.trend import classify_trend
from techub.models.base import ensure_utc, utcnow

logger = structlog.get_logger()

MONITORING_TYPE = "mps"

# days of history shown per granularity
HISTORY_DAYS = {DAILY: 15, HOURLY: 5}


def monitored_percentage(total_base: int, total_unmonitored: int) -> float:
    if total_base <= 0:
        return 0.0
    return round((total_base - total_unmonitored) / total_base * 100, 2)


async def record_reading(db: AsyncSession, data: FleetReadingCreate) -> FleetReading:
    reading = FleetReading(
        company=data.company.strip(),
        total_base=data.total_base,
        total_unmonitored=data.total_unmonitored,
        recorded_at=data.recorded_at or utcnow(),
    )
    db.add(reading)
    await db.commit()
    await db.refresh(reading)
    logger.info("fleet_reading_recorded", company=reading.company, total_base=reading.total_base)
    return reading


async def get_monitoring_data(db: AsyncSession, now: datetime | None = None, evaluate: bool = True) -> list[dict]:
    """Latest reading per company, newest first, with trend and any alerts it warrants."""
    now = now or utcnow()
    result = await db.execute(select(FleetReading).order_by(FleetReading.recorded_at.desc()))

    # newest first; the first row seen per company is its latest reading
    per_company: dict[str, list[tuple[int, int, datetime]]] = {}
    for r in result.scalars().all():
        per_company.setdefault(r.company, []).append((r.total_base, r.total_unmonitored, ensure_utc(r.recorded_at)))

    rows = []
    for company, readings in per_company.items():
        total_base, total_unmonitored, recorded_at = readings[0]
        percentage = monitored_percentage(total_base, total_unmonitored)
        history = [monitored_percentage(b, u) for b, u, _ in reversed(readings[1:])]
        previous = history[-1] if history else None
        rows.append({
            "company": company,
            "total_base": total_base,
            "total_unmonitored": total_unmonitored,
            "monitored": total_base - total_unmonitored,
            "percentage": percentage,
            "trend": classify_trend(percentage, previous),
            "variation": round(percentage - previous, 2) if previous is not None else 0.0,
            "recorded_at": recorded_at,
            "average_comparison": compare_to_average(percentage, history),
            "_history": history,
        })

    repo = AlertRepository(db)
    if evaluate:
        alert_settings = AlertSettingsResponse.model_validate(await get_alert_settings(db, MONITORING_TYPE))
        for row in rows:
            try:
                requests = evaluate_reading(
                    MONITORING_TYPE,
                    row["company"],
                    row["percentage"],
                    row["_history"],
                    settings.DEFAULT_META_ATENCAO,
                    alert_settings,
                )
            except Exception:
                logger.exception("alert_evaluation_failed", monitoring_type=MONITORING_TYPE, subject=row["company"])
                continue
            await raise_alerts(repo, requests, now=now)

    active = await repo.find_in_range(AlertQuery(monitoring_type=MONITORING_TYPE, resolved=False))
    alerts_by_company: dict[str, set[str]] = {}
    for alert in active:
        alerts_by_company.setdefault(alert.subject, set()).add(alert.alert_type)

    for row in rows:
        row.pop("_history")
        row["active_alerts"] = sorted(alerts_by_company.get(row["company"], ()))

    logger.debug("fleet_monitoring_data_built", companies=len(rows))
    return rows


async def get_reading_history(
    db: AsyncSession,
    company: str,
    granularity: str = DAILY,
    now: datetime | None = None,
) -> list[dict]:
    """Readings for one company summed per day or hour, oldest first."""
    now = now or utcnow()
    since = now - timedelta(days=HISTORY_DAYS[granularity])
    result = await db.execute(
        select(FleetReading)
        .where(FleetReading.company == company, FleetReading.recorded_at >= since)
        .order_by(FleetReading.recorded_at.asc())
    )

    buckets: dict[str, dict] = {}
    for reading in result.scalars().all():
        recorded_at = ensure_utc(reading.recorded_at)
        key = period_key(recorded_at, granularity)
        bucket = buckets.setdefault(key, {
            "key": key,
            "label": period_label(recorded_at, granularity),
            "recorded_at": recorded_at,
            "total_base": 0,
            "total_unmonitored": 0,
        })
        bucket["total_base"] += reading.total_base
        bucket["total_unmonitored"] += reading.total_unmonitored

    points = []
    for bucket in buckets.values():
        base = bucket["total_base"]
        # an empty park has nothing unmonitored
        bucket["percentage"] = monitored_percentage(base, bucket["total_unmonitored"]) if base > 0 else 100.0
        points.append(bucket)
    return points
