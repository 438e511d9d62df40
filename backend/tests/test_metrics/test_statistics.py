import pytest

from techub.metrics.statistics import (
    compare_to_average,
    detect_anomaly,
    detect_consecutive_decline,
    moving_average,
    standard_deviation,
)


def test_moving_average_uses_the_tail():
    assert moving_average([1, 2, 3, 10, 20], window=2) == 15
    assert moving_average([1, 2], window=3) is None


def test_standard_deviation_is_sample_based():
    assert standard_deviation([5]) == 0.0
    assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.138, rel=1e-3)


def test_anomaly_needs_a_full_window():
    assert not detect_anomaly([95, 96], 10, window=7)


def test_anomaly_on_sharp_drop():
    history = [95, 96, 94, 95, 97, 96, 95]
    assert detect_anomaly(history, 80, window=7, multiplier=2.0)
    assert not detect_anomaly(history, 94, window=7, multiplier=2.0)


def test_anomaly_disabled():
    history = [95, 96, 94, 95, 97, 96, 95]
    assert not detect_anomaly(history, 10, enabled=False)


def test_consecutive_decline():
    assert detect_consecutive_decline([99, 98, 97], 96, periods=3)
    assert not detect_consecutive_decline([99, 97, 98], 96, periods=3)
    assert not detect_consecutive_decline([98, 97], 96, periods=3)
    assert not detect_consecutive_decline([99, 98, 97], 97, periods=3)
    assert not detect_consecutive_decline([99, 98, 97], 96, periods=3, enabled=False)


def test_compare_to_average():
    result = compare_to_average(110, [100] * 7, window=7)
    assert result["diff_percent"] == pytest.approx(10.0)
    assert result["label"] == "vs média 7 dias"
    assert compare_to_average(50, []) is None
    assert compare_to_average(50, [0] * 7) is None
