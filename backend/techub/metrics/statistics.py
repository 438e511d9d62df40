"""Moving-average based anomaly and decline detection over percentage history."""

import math
from typing import Sequence


def moving_average(values: Sequence[float], window: int = 7) -> float | None:
    if window <= 0 or len(values) < window:
        return None
    return sum(values[-window:]) / window


def standard_deviation(values: Sequence[float]) -> float:
    """Sample standard deviation; 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / (len(values) - 1)
    return math.sqrt(variance)


def detect_anomaly(
    history: Sequence[float],
    current: float,
    window: int = 7,
    multiplier: float = 2.0,
    enabled: bool = True,
) -> bool:
    """True when current falls below mean - multiplier * stddev of the last window points."""
    if not enabled or len(history) < window:
        return False
    average = moving_average(history, window)
    if average is None:
        return False
    deviation = standard_deviation(history[-window:])
    return current < average - multiplier * deviation


def detect_consecutive_decline(
    history: Sequence[float],
    current: float,
    periods: int = 3,
    enabled: bool = True,
) -> bool:
    """True when the series ending at current dropped strictly for ``periods`` steps."""
    if not enabled or periods <= 0 or len(history) < periods:
        return False
    series = list(history) + [current]
    for step in range(periods):
        idx = len(series) - 1 - step
        if series[idx] >= series[idx - 1]:
            return False
    return True


def compare_to_average(
    current: float,
    history: Sequence[float],
    window: int = 7,
) -> dict | None:
    if not history:
        return None
    average = moving_average(history, window)
    if average is None or average == 0:
        return None
    return {
        "diff_percent": round((current - average) / average * 100, 2),
        "label": f"vs média {window} dias",
    }
