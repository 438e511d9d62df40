from techub.metrics.trend import TrendDirection, classify_trend


def test_classification():
    assert classify_trend(50, 50) == TrendDirection.STABLE
    assert classify_trend(80, 60) == TrendDirection.UP
    assert classify_trend(60, 80) == TrendDirection.DOWN


def test_first_observation_is_stable():
    for value in (0, 42.5, 100):
        assert classify_trend(value, None) == TrendDirection.STABLE


def test_small_changes_are_stable():
    assert classify_trend(90.4, 90.0, epsilon=0.5) == TrendDirection.STABLE
    assert classify_trend(90.5, 90.0, epsilon=0.5) == TrendDirection.STABLE
    assert classify_trend(90.6, 90.0, epsilon=0.5) == TrendDirection.UP
    assert classify_trend(89.4, 90.0, epsilon=0.5) == TrendDirection.DOWN


def test_zero_epsilon_is_strict():
    assert classify_trend(90.01, 90.0, epsilon=0) == TrendDirection.UP


def test_serialises_as_plain_string():
    assert TrendDirection.DOWN.value == "down"
    assert TrendDirection("up") is TrendDirection.UP


def test_boundary_holds_for_two_decimal_percentages():
    for current, previous in [(64.01, 63.51), (63.51, 64.01), (99.99, 99.49), (80.5, 80.0)]:
        assert classify_trend(current, previous, epsilon=0.5) == TrendDirection.STABLE
    assert classify_trend(64.02, 63.51, epsilon=0.5) == TrendDirection.UP
    assert classify_trend(63.5, 64.01, epsilon=0.5) == TrendDirection.DOWN
