"""Queue x age-range heatmap of open backlog items."""

from dataclasses import dataclass, field
from typing import Iterable, NamedTuple


class AgeRange(NamedTuple):
    key: str
    label: str
    upper: int | None  # inclusive; None means unbounded


AGE_RANGES: tuple[AgeRange, ...] = (
    AgeRange("ate3", "Até 3 dias", 3),
    AgeRange("4a5", "4 a 5 dias", 5),
    AgeRange("6a10", "6 a 10 dias", 10),
    AgeRange("11a30", "11 a 30 dias", 30),
    AgeRange("31a50", "31 a 50 dias", 50),
    AgeRange("acima50", "Acima de 50 dias", None),
)
AGE_RANGE_KEYS = {r.key: r for r in AGE_RANGES}
NO_INFO_LABEL = "Sem info"
UNASSIGNED_CATEGORY = "Sem Fila"
HEATMAP_COLUMNS: tuple[str, ...] = tuple(r.label for r in AGE_RANGES) + (NO_INFO_LABEL,)

# Lower bound of each intensity tier, as a ratio of the hottest cell.
HEAT_TIER_THRESHOLDS = (0.2, 0.4, 0.6, 0.8)


def classify_age(days: int | None) -> str:
    if days is None:
        return NO_INFO_LABEL
    for age_range in AGE_RANGES:
        if age_range.upper is None or days <= age_range.upper:
            return age_range.label
    return AGE_RANGES[-1].label


def matches_age_range(days: int | None, key: str | None) -> bool:
    """Filter predicate for an age-range key; an empty key matches anything."""
    if not key:
        return True
    age_range = AGE_RANGE_KEYS.get(key)
    if age_range is None:
        return True
    if days is None:
        return False
    return classify_age(days) == age_range.label


def heat_tier(value: int, max_value: int) -> int:
    """Intensity tier 1-5 relative to the hottest cell; 0 means no data."""
    if max_value <= 0 or value <= 0:
        return 0
    ratio = value / max_value
    for tier, threshold in enumerate(HEAT_TIER_THRESHOLDS, start=1):
        if ratio < threshold:
            return tier
    return len(HEAT_TIER_THRESHOLDS) + 1


@dataclass
class Heatmap:
    categories: list[str]
    cells: dict[str, dict[str, int]]
    max_value: int
    columns: tuple[str, ...] = field(default=HEATMAP_COLUMNS)

    def total(self, category: str) -> int:
        return sum(self.cells.get(category, {}).values())

    def rows(self) -> list[dict]:
        rows = []
        for category in self.categories:
            counts = self.cells.get(category, {})
            rows.append({
                "category": category,
                "cells": [
                    {
                        "range": column,
                        "count": counts.get(column, 0),
                        "tier": heat_tier(counts.get(column, 0), self.max_value),
                    }
                    for column in self.columns
                ],
                "total": self.total(category),
            })
        return rows


def build_heatmap(
    items: Iterable[tuple[str | None, int | None]],
    top_n: int = 20,
) -> Heatmap:
    """Cross-tabulate (category, age) pairs and keep the busiest categories."""
    cells: dict[str, dict[str, int]] = {}
    for category, days in items:
        category = category or UNASSIGNED_CATEGORY
        label = classify_age(days)
        row = cells.setdefault(category, {})
        row[label] = row.get(label, 0) + 1

    # sorted() is stable, so equal totals keep encounter order
    ranked = sorted(cells, key=lambda c: sum(cells[c].values()), reverse=True)
    categories = ranked[:top_n]

    max_value = 0
    for category in categories:
        for count in cells[category].values():
            max_value = max(max_value, count)

    return Heatmap(
        categories=categories,
        cells={c: cells[c] for c in categories},
        max_value=max_value,
    )
