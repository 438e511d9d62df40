from datetime import date, datetime, timezone

from techub.metrics.bucketing import (
    DAILY,
    HOURLY,
    bucket_counts,
    count_by_day,
    day_key,
    days_between,
    period_key,
    period_label,
)


def test_day_key_truncates_strings_and_datetimes():
    assert day_key("2024-03-01T23:59:59-03:00") == date(2024, 3, 1)
    assert day_key("2024-03-01") == date(2024, 3, 1)
    assert day_key(datetime(2024, 3, 1, 0, 0, 1, tzinfo=timezone.utc)) == date(2024, 3, 1)
    assert day_key(date(2024, 3, 1)) == date(2024, 3, 1)


def test_day_key_rejects_missing_or_malformed_values():
    assert day_key(None) is None
    assert day_key("2024-03") is None
    assert day_key("not-a-date-at-all") is None


def test_same_day_at_different_times_shares_a_bucket():
    counts = count_by_day([
        "2024-03-01T00:00:00",
        "2024-03-01T12:30:00",
        datetime(2024, 3, 1, 23, 59),
        None,
    ])
    assert counts == {date(2024, 3, 1): 3}


def test_days_between_is_inclusive_and_ordered():
    days = days_between(date(2024, 2, 27), date(2024, 3, 2))
    assert days == [
        date(2024, 2, 27),
        date(2024, 2, 28),
        date(2024, 2, 29),
        date(2024, 3, 1),
        date(2024, 3, 2),
    ]


def test_days_between_start_after_end_is_empty():
    assert days_between(date(2024, 3, 5), date(2024, 3, 1)) == []


def test_bucket_counts_gap_fills_every_day():
    start, end = date(2024, 3, 1), date(2024, 3, 10)
    buckets = bucket_counts(["2024-03-02", "2024-03-02", "2024-03-09T10:00:00"], start, end)

    assert len(buckets) == (end - start).days + 1
    assert dict(buckets)[date(2024, 3, 2)] == 2
    assert dict(buckets)[date(2024, 3, 9)] == 1
    assert sum(count for _, count in buckets) == 3
    assert all(count == 0 for day, count in buckets if day not in (date(2024, 3, 2), date(2024, 3, 9)))


def test_bucket_counts_ignores_records_outside_interval():
    buckets = bucket_counts(["2024-02-28", "2024-03-01"], date(2024, 3, 1), date(2024, 3, 1))
    assert buckets == [(date(2024, 3, 1), 1)]


def test_period_key_and_label_by_granularity():
    moment = datetime(2024, 3, 7, 14, 45)
    assert period_key(moment, DAILY) == "2024-03-07"
    assert period_label(moment, DAILY) == "07/03"
    assert period_key(moment, HOURLY) == "2024-03-07 14"
    assert period_label(moment, HOURLY) == "07/03 14h"
