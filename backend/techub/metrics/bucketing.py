"""Calendar-day bucketing of timestamped records.

Day keys are derived by truncation only: an ISO string keeps its first ten
characters, a datetime keeps its own date. No timezone conversion happens, so
two instants written on the same calendar day always share a key.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable

DAILY = "daily"
HOURLY = "hourly"


def day_key(value: datetime | date | str | None) -> date | None:
    """Truncate a timestamp to its calendar day, or None when it has none."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def days_between(start: date, end: date) -> list[date]:
    """Every calendar day from start to end inclusive; empty when start > end."""
    if start > end:
        return []
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def count_by_day(values: Iterable[datetime | date | str | None]) -> Counter:
    counts: Counter = Counter()
    for value in values:
        key = day_key(value)
        if key is None:
            continue
        counts[key] += 1
    return counts


def bucket_counts(
    values: Iterable[datetime | date | str | None],
    start: date,
    end: date,
) -> list[tuple[date, int]]:
    """Gap-filled (day, count) pairs covering [start, end]."""
    counts = count_by_day(values)
    return [(day, counts.get(day, 0)) for day in days_between(start, end)]


def period_key(value: datetime, granularity: str = DAILY) -> str:
    if granularity == HOURLY:
        return value.strftime("%Y-%m-%d %H")
    return value.strftime("%Y-%m-%d")


def period_label(value: datetime, granularity: str = DAILY) -> str:
    if granularity == HOURLY:
        return value.strftime("%d/%m %H") + "h"
    return value.strftime("%d/%m")
