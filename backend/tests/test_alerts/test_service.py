from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from techub.alerts.evaluation import evaluate_reading, raise_alerts
from techub.alerts.models import MonitoringAlert
from techub.alerts.repository import AlertKey, AlertQuery, AlertRepository
from techub.alerts.schemas import AlertRequest, AlertSettingsBase
from techub.alerts.service import (
    get_alert_settings,
    persist_alert,
    resolve_alert,
    summarize_alerts,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def _request(**overrides) -> AlertRequest:
    data = {
        "monitoring_type": "sla_fila",
        "subject": "N1 Suporte",
        "alert_type": "limite",
        "severity": "critical",
        "current_percentage": 72.456,
        "context": {"reason": "abaixo da meta"},
    }
    data.update(overrides)
    return AlertRequest(**data)


async def _count(db) -> int:
    result = await db.execute(select(func.count()).select_from(MonitoringAlert))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_duplicate_within_window_is_suppressed(db_session):
    repo = AlertRepository(db_session)
    first = await persist_alert(repo, _request(), now=NOW)
    second = await persist_alert(repo, _request(), now=NOW + timedelta(seconds=40))

    assert first is not None
    assert first.current_percentage == 72.46
    assert second is None
    assert await _count(db_session) == 1


@pytest.mark.asyncio
async def test_resolution_reopens_the_key(db_session, seeded_users):
    repo = AlertRepository(db_session)
    first = await persist_alert(repo, _request(), now=NOW)
    await resolve_alert(repo, first, seeded_users["admin"].id, "Fila normalizada", now=NOW + timedelta(seconds=20))
    second = await persist_alert(repo, _request(), now=NOW + timedelta(seconds=50))

    assert second is not None
    assert second.id != first.id
    assert await _count(db_session) == 2


@pytest.mark.asyncio
async def test_active_alert_older_than_window_does_not_block(db_session):
    repo = AlertRepository(db_session)
    await persist_alert(repo, _request(), now=NOW)
    again = await persist_alert(repo, _request(), now=NOW + timedelta(hours=4, minutes=1))

    assert again is not None
    assert await _count(db_session) == 2


@pytest.mark.asyncio
async def test_key_includes_alert_type_and_subject(db_session):
    repo = AlertRepository(db_session)
    await persist_alert(repo, _request(), now=NOW)
    await persist_alert(repo, _request(alert_type="tendencia", severity="warning"), now=NOW)
    await persist_alert(repo, _request(subject="N2 Campo"), now=NOW)
    await persist_alert(repo, _request(monitoring_type="sla_projeto"), now=NOW)

    assert await _count(db_session) == 4


class _BrokenRepository:
    def __init__(self, fail_on: str):
        self.fail_on = fail_on
        self.rolled_back = False

    async def find_latest_by_key(self, key, since):
        if self.fail_on == "check":
            raise RuntimeError("storage unavailable")
        return None

    async def add(self, alert):
        raise RuntimeError("insert rejected")

    async def rollback(self):
        self.rolled_back = True


@pytest.mark.asyncio
@pytest.mark.parametrize("fail_on", ["check", "insert"])
async def test_storage_errors_are_swallowed(fail_on):
    repo = _BrokenRepository(fail_on)
    result = await persist_alert(repo, _request(), now=NOW)

    assert result is None
    assert repo.rolled_back


@pytest.mark.asyncio
async def test_resolve_is_one_way(db_session, seeded_users):
    repo = AlertRepository(db_session)
    alert = await persist_alert(repo, _request(), now=NOW)
    user_id = seeded_users["admin"].id

    resolved = await resolve_alert(repo, alert, user_id, "  tratado  ", now=NOW + timedelta(minutes=30))
    assert resolved.resolved is True
    assert resolved.resolved_by == user_id
    assert resolved.resolution_comment == "tratado"

    assert await resolve_alert(repo, resolved, user_id, "de novo") is None


@pytest.mark.asyncio
async def test_repository_queries(db_session):
    repo = AlertRepository(db_session)
    await persist_alert(repo, _request(), now=NOW - timedelta(days=2))
    await persist_alert(repo, _request(subject="N2 Campo"), now=NOW)

    recent = await repo.find_in_range(AlertQuery(detected_from=NOW - timedelta(hours=1)))
    assert [a.subject for a in recent] == ["N2 Campo"]
    assert await repo.count(AlertQuery(search="n1")) == 1
    assert await repo.find_latest_by_key(
        AlertKey("sla_fila", "N1 Suporte", "limite"), since=NOW - timedelta(hours=4)
    ) is None


def test_summary_counts():
    def alert(**kw):
        base = dict(
            alert_type="limite",
            severity="critical",
            resolved=False,
            resolved_at=None,
            detected_at=NOW,
        )
        base.update(kw)
        return MonitoringAlert(**base)

    alerts = [
        alert(),
        alert(alert_type="tendencia", severity="warning"),
        alert(resolved=True, resolved_at=NOW + timedelta(minutes=30)),
        alert(resolved=True, resolved_at=(NOW + timedelta(minutes=90)).replace(tzinfo=None)),
    ]
    summary = summarize_alerts(alerts, today=date(2024, 3, 10))

    assert summary["active"] == 2
    assert summary["critical"] == 1
    assert summary["by_type"] == {"limite": 1, "tendencia": 1, "anomalia": 0}
    assert summary["resolved_today"] == 2
    assert summary["avg_response_minutes"] == 60


@pytest.mark.asyncio
async def test_settings_default_when_missing(db_session):
    stored = await get_alert_settings(db_session, "mps")
    assert stored.anomaly_enabled is True
    assert stored.anomaly_moving_avg_days == 7
    assert stored.trend_consecutive_periods == 3


def test_evaluate_reading_below_attention():
    requests = evaluate_reading("mps", "Acme", 75.0, [], 80.0, AlertSettingsBase())
    assert [(r.alert_type, r.severity) for r in requests] == [("limite", "critical")]


def test_evaluate_reading_decline_and_anomaly():
    history = [99.0, 99.2, 98.9, 99.1, 99.0, 98.8, 98.5]
    requests = evaluate_reading("sla_fila", "N1", 90.0, history, 80.0, AlertSettingsBase())
    assert {r.alert_type for r in requests} == {"tendencia", "anomalia"}


def test_evaluate_reading_respects_disabled_detectors():
    history = [99.0, 99.2, 98.9, 99.1, 99.0, 98.8, 98.5]
    config = AlertSettingsBase(anomaly_enabled=False, trend_enabled=False)
    assert evaluate_reading("sla_fila", "N1", 90.0, history, 80.0, config) == []


@pytest.mark.asyncio
async def test_raise_alerts_only_returns_new_rows(db_session):
    repo = AlertRepository(db_session)
    requests = [_request(), _request()]
    created = await raise_alerts(repo, requests, now=NOW)
    assert len(created) == 1
