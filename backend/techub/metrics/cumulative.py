from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from techub.metrics.bucketing import count_by_day, days_between


@dataclass(frozen=True)
class DayBucket:
    day: date
    opened: int
    closed: int
    cumulative: int

    @property
    def label(self) -> str:
        return self.day.strftime("%d/%m")

    def as_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "label": self.label,
            "opened": self.opened,
            "closed": self.closed,
            "cumulative": self.cumulative,
        }


def build_cumulative_series(
    rows: Iterable[tuple[date, int, int]],
    seed: int = 0,
) -> list[DayBucket]:
    """Running net total over day-ordered (day, opened, closed) rows.

    Single forward pass: a day's cumulative value depends only on the seed and
    the days before it.
    """
    running = seed
    series = []
    for day, opened, closed in rows:
        running += opened - closed
        series.append(DayBucket(day=day, opened=opened, closed=closed, cumulative=running))
    return series


def build_operational_flow(
    opened_values: Iterable[datetime | date | str | None],
    closed_values: Iterable[datetime | date | str | None],
    start: date,
    end: date,
    seed: int = 0,
) -> list[DayBucket]:
    """Opened vs closed per day over [start, end], with the net running balance."""
    opened_by_day = count_by_day(opened_values)
    closed_by_day = count_by_day(closed_values)
    rows = (
        (day, opened_by_day.get(day, 0), closed_by_day.get(day, 0))
        for day in days_between(start, end)
    )
    return build_cumulative_series(rows, seed=seed)


def build_open_backlog_series(
    created_values: Iterable[datetime | date | str | None],
    max_days: int = 60,
) -> list[DayBucket]:
    """Accumulated still-open backlog by creation day.

    Only meaningful when the input holds currently-open items: an item counted
    here is assumed not to have closed since. Days without items are not
    emitted and only the most recent ``max_days`` days are kept.
    """
    opened_by_day = count_by_day(created_values)
    days = sorted(opened_by_day)
    if max_days > 0:
        days = days[-max_days:]
    return build_cumulative_series((day, opened_by_day[day], 0) for day in days)
