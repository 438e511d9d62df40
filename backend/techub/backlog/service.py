from datetime import date, datetime, time, timedelta, timezone

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from techub.backlog.models import BacklogDailyTotal, BacklogItem
from techub.backlog.schemas import BacklogFilters
from techub.config import settings
from techub.metrics.cumulative import DayBucket, build_open_backlog_series, build_operational_flow
from techub.metrics.heatmap import Heatmap, build_heatmap, matches_age_range
from techub.models.base import utcnow
from techub.sla.models import SLATicket

logger = structlog.get_logger()

# filter field -> model column, for the multi-value equality filters
FILTER_COLUMNS = {
    "project_code": BacklogItem.project_code,
    "company_name": BacklogItem.company_name,
    "queue": BacklogItem.queue,
    "state": BacklogItem.state,
    "assigned_account": BacklogItem.assigned_account,
    "status": BacklogItem.status,
    "client_status": BacklogItem.client_status,
    "incident_type": BacklogItem.incident_type,
}


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def has_active_filters(filters: BacklogFilters | None) -> bool:
    if filters is None:
        return False
    return any(
        value not in (None, "", [])
        for value in filters.model_dump().values()
    )


async def get_backlog_items(db: AsyncSession, filters: BacklogFilters | None = None) -> list[BacklogItem]:
    query = select(BacklogItem)
    if filters is not None:
        if filters.date_from:
            query = query.where(BacklogItem.opened_at >= _day_start(filters.date_from))
        if filters.date_to:
            query = query.where(BacklogItem.opened_at < _day_start(filters.date_to + timedelta(days=1)))
        for field, column in FILTER_COLUMNS.items():
            values = getattr(filters, field)
            if values:
                query = query.where(column.in_(values))

    result = await db.execute(query.order_by(BacklogItem.days_open.desc()))
    items = list(result.scalars().all())

    if filters is not None and filters.age_range:
        items = [i for i in items if matches_age_range(i.days_open, filters.age_range)]
    return items


async def get_filter_options(db: AsyncSession) -> dict[str, list[str]]:
    options = {}
    for field, column in FILTER_COLUMNS.items():
        result = await db.execute(select(column).where(and_(column.isnot(None), column != "")).distinct())
        options[field] = sorted(result.scalars().all())
    return options


def compute_backlog_totals(items: list[BacklogItem]) -> dict:
    total = len(items)
    ages = [i.days_open or 0 for i in items]
    return {
        "total_backlog": total,
        "above_30": sum(1 for a in ages if a > 30),
        "above_50": sum(1 for a in ages if a > 50),
        "average_age": (sum(ages) / total) if total else 0.0,
    }


def compute_kpis(
    items: list[BacklogItem],
    snapshot: BacklogDailyTotal | None = None,
    yesterday_total: int | None = None,
) -> dict:
    """Headline backlog numbers; a persisted snapshot, when given, wins over live counts."""
    if snapshot is not None:
        totals = {
            "total_backlog": snapshot.total_backlog,
            "above_30": snapshot.above_30,
            "above_50": snapshot.above_50,
            "average_age": snapshot.average_age or 0.0,
        }
    else:
        totals = compute_backlog_totals(items)

    project_counts: dict[str, int] = {}
    for item in items:
        key = item.project_name or item.project_code or "N/A"
        project_counts[key] = project_counts.get(key, 0) + 1
    top_projects = sorted(project_counts.items(), key=lambda kv: kv[1], reverse=True)[:5]

    delta_abs = delta_pct = None
    if yesterday_total is not None:
        delta_abs = totals["total_backlog"] - yesterday_total
        delta_pct = round(delta_abs / yesterday_total * 100) if yesterday_total > 0 else None

    return {
        "total_backlog": totals["total_backlog"],
        "above_30": totals["above_30"],
        "above_50": totals["above_50"],
        "average_age": round(totals["average_age"]),
        "top_projects": [{"project": p, "count": c} for p, c in top_projects],
        "yesterday_total": yesterday_total,
        "delta_abs": delta_abs,
        "delta_pct": delta_pct,
        "from_snapshot": snapshot is not None,
    }


async def get_daily_total(db: AsyncSession, day: date) -> BacklogDailyTotal | None:
    result = await db.execute(select(BacklogDailyTotal).where(BacklogDailyTotal.data_ref == day))
    return result.scalar_one_or_none()


async def record_daily_total(db: AsyncSession, day: date | None = None) -> BacklogDailyTotal:
    """Snapshot the current backlog for ``day``; re-running the same day overwrites it."""
    day = day or utcnow().date()
    totals = compute_backlog_totals(await get_backlog_items(db))

    snapshot = await get_daily_total(db, day)
    if snapshot is None:
        snapshot = BacklogDailyTotal(data_ref=day, **totals)
        db.add(snapshot)
    else:
        for field, value in totals.items():
            setattr(snapshot, field, value)
    await db.commit()
    await db.refresh(snapshot)
    logger.info("backlog_daily_total_recorded", data_ref=day.isoformat(), total=snapshot.total_backlog)
    return snapshot


async def get_kpis(db: AsyncSession, filters: BacklogFilters | None = None, today: date | None = None) -> dict:
    today = today or utcnow().date()
    items = await get_backlog_items(db, filters)

    snapshot = None
    if not has_active_filters(filters):
        snapshot = await get_daily_total(db, today)
        if snapshot is None:
            snapshot = await record_daily_total(db, today)

    yesterday = await get_daily_total(db, today - timedelta(days=1))
    return compute_kpis(items, snapshot, yesterday.total_backlog if yesterday else None)


async def get_daily_history(db: AsyncSession, date_from: date, date_to: date) -> list[BacklogDailyTotal]:
    if date_from > date_to:
        return []
    result = await db.execute(
        select(BacklogDailyTotal)
        .where(BacklogDailyTotal.data_ref >= date_from, BacklogDailyTotal.data_ref <= date_to)
        .order_by(BacklogDailyTotal.data_ref.asc())
    )
    return list(result.scalars().all())


async def get_operational_flow(db: AsyncSession, today: date | None = None) -> list[DayBucket]:
    """Month-to-date opened vs closed tickets per day with the running balance."""
    today = today or utcnow().date()
    start = today.replace(day=1)
    range_start, range_end = _day_start(start), _day_start(today + timedelta(days=1))

    opened = await db.execute(
        select(SLATicket.opened_at).where(SLATicket.opened_at >= range_start, SLATicket.opened_at < range_end)
    )
    closed = await db.execute(
        select(SLATicket.closed_at).where(
            SLATicket.closed_at.isnot(None),
            SLATicket.closed_at >= range_start,
            SLATicket.closed_at < range_end,
        )
    )
    return build_operational_flow(opened.scalars().all(), closed.scalars().all(), start, today)


async def get_open_backlog_series(db: AsyncSession, filters: BacklogFilters | None = None) -> list[DayBucket]:
    items = await get_backlog_items(db, filters)
    return build_open_backlog_series(
        (i.opened_at for i in items),
        max_days=settings.OPEN_BACKLOG_MAX_DAYS,
    )


async def get_heatmap(db: AsyncSession, filters: BacklogFilters | None = None) -> Heatmap:
    items = await get_backlog_items(db, filters)
    return build_heatmap(((i.queue, i.days_open) for i in items), top_n=settings.HEATMAP_TOP_N)
