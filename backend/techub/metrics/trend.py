from enum import Enum

from techub.config import settings


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


def classify_trend(
    current: float,
    previous: float | None,
    epsilon: float | None = None,
) -> TrendDirection:
    """Direction of a percentage against its previous reading.

    A change within ``epsilon`` percentage points (inclusive) is stable, as is
    a first observation with no previous value.
    """
    if previous is None:
        return TrendDirection.STABLE
    if epsilon is None:
        epsilon = settings.TREND_STABILITY_EPSILON

    # percentages carry two decimals; rounding keeps the epsilon boundary exact
    variation = round(current - previous, 6)
    if abs(variation) <= epsilon:
        return TrendDirection.STABLE
    return TrendDirection.UP if variation > 0 else TrendDirection.DOWN
