from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from techub.alerts.models import MonitoringAlert
from techub.fleet.models import FleetReading
from techub.fleet.service import (
    get_monitoring_data,
    get_reading_history,
    monitored_percentage,
)
from techub.metrics.bucketing import HOURLY

NOW = datetime(2024, 3, 20, 15, 30, tzinfo=timezone.utc)


def _reading(company: str, base: int, unmonitored: int, hours_ago: float) -> FleetReading:
    return FleetReading(
        company=company,
        total_base=base,
        total_unmonitored=unmonitored,
        recorded_at=NOW - timedelta(hours=hours_ago),
    )


def test_monitored_percentage():
    assert monitored_percentage(3, 1) == 66.67
    assert monitored_percentage(0, 0) == 0.0


@pytest.mark.asyncio
async def test_latest_reading_per_company(db_session):
    db_session.add_all([
        _reading("Acme", 200, 10, hours_ago=3),
        _reading("Acme", 200, 2, hours_ago=1),
        _reading("Beta", 0, 0, hours_ago=2),
    ])
    await db_session.commit()

    rows = {r["company"]: r for r in await get_monitoring_data(db_session, now=NOW)}

    assert rows["Acme"]["percentage"] == 99.0
    assert rows["Acme"]["monitored"] == 198
    assert rows["Acme"]["trend"].value == "up"
    assert rows["Acme"]["variation"] == 4.0
    assert rows["Beta"]["percentage"] == 0.0
    assert rows["Beta"]["active_alerts"] == ["limite"]


@pytest.mark.asyncio
async def test_alerts_are_keyed_by_company(db_session):
    db_session.add_all([_reading("Acme", 100, 50, hours_ago=1), _reading("Beta", 100, 45, hours_ago=1)])
    await db_session.commit()

    await get_monitoring_data(db_session, now=NOW)
    await get_monitoring_data(db_session, now=NOW + timedelta(minutes=5))

    result = await db_session.execute(select(MonitoringAlert.subject, MonitoringAlert.monitoring_type))
    assert sorted(result.all()) == [("Acme", "mps"), ("Beta", "mps")]


@pytest.mark.asyncio
async def test_daily_history_aggregates_per_day(db_session):
    db_session.add_all([
        _reading("Acme", 100, 10, hours_ago=1),
        _reading("Acme", 100, 30, hours_ago=2),
        _reading("Acme", 100, 0, hours_ago=24),
        _reading("Acme", 100, 0, hours_ago=24 * 20),
        _reading("Beta", 100, 100, hours_ago=1),
    ])
    await db_session.commit()

    points = await get_reading_history(db_session, "Acme", now=NOW)
    assert [(p["label"], p["total_base"], p["percentage"]) for p in points] == [
        ("19/03", 100, 100.0),
        ("20/03", 200, 80.0),
    ]


@pytest.mark.asyncio
async def test_hourly_history(db_session):
    db_session.add_all([
        _reading("Acme", 100, 10, hours_ago=1),
        _reading("Acme", 100, 20, hours_ago=1.1),
        _reading("Acme", 0, 0, hours_ago=3),
        _reading("Acme", 100, 0, hours_ago=24 * 6),
    ])
    await db_session.commit()

    points = await get_reading_history(db_session, "Acme", granularity=HOURLY, now=NOW)
    assert [(p["key"], p["percentage"]) for p in points] == [
        ("2024-03-20 12", 100.0),
        ("2024-03-20 14", 85.0),
    ]


@pytest.mark.asyncio
async def test_unusable_company_name_skips_only_its_alerts(db_session):
    db_session.add_all([_reading("", 100, 50, hours_ago=1), _reading("Acme", 100, 50, hours_ago=1)])
    await db_session.commit()

    rows = {r["company"]: r for r in await get_monitoring_data(db_session, now=NOW)}

    assert rows[""]["active_alerts"] == []
    assert rows["Acme"]["active_alerts"] == ["limite"]


@pytest.mark.asyncio
async def test_average_comparison_needs_a_full_window(db_session):
    db_session.add_all([_reading("Acme", 100, 10, hours_ago=h) for h in range(9, 2, -1)])
    db_session.add_all([_reading("Acme", 100, 1, hours_ago=1), _reading("Beta", 100, 1, hours_ago=1)])
    await db_session.commit()

    rows = {r["company"]: r for r in await get_monitoring_data(db_session, now=NOW, evaluate=False)}

    assert rows["Acme"]["average_comparison"] == {"diff_percent": 10.0, "label": "vs média 7 dias"}
    assert rows["Beta"]["average_comparison"] is None
