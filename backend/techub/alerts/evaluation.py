"""Decide which alerts a fresh percentage reading warrants."""

from datetime import datetime
from typing import Sequence

from techub.alerts.models import MonitoringAlert
from techub.alerts.repository import AlertRepository
from techub.alerts.schemas import AlertRequest, AlertSettingsBase
from techub.alerts.service import persist_alert
from techub.metrics.statistics import detect_anomaly, detect_consecutive_decline


def evaluate_reading(
    monitoring_type: str,
    subject: str,
    current: float,
    history: Sequence[float],
    attention_threshold: float,
    alert_settings: AlertSettingsBase,
) -> list[AlertRequest]:
    """Alerts for one reading. ``history`` holds earlier readings, oldest first."""
    requests = []

    if current < attention_threshold:
        requests.append(AlertRequest(
            monitoring_type=monitoring_type,
            subject=subject,
            alert_type="limite",
            severity="critical",
            current_percentage=current,
            context={"reason": f"Percentual abaixo da meta de atenção de {attention_threshold:g}%"},
        ))

    if detect_consecutive_decline(
        history,
        current,
        periods=alert_settings.trend_consecutive_periods,
        enabled=alert_settings.trend_enabled,
    ):
        requests.append(AlertRequest(
            monitoring_type=monitoring_type,
            subject=subject,
            alert_type="tendencia",
            severity="warning",
            current_percentage=current,
            context={"trend": "down", "periods": alert_settings.trend_consecutive_periods},
        ))

    if detect_anomaly(
        history,
        current,
        window=alert_settings.anomaly_moving_avg_days,
        multiplier=alert_settings.anomaly_stddev_multiplier,
        enabled=alert_settings.anomaly_enabled,
    ):
        requests.append(AlertRequest(
            monitoring_type=monitoring_type,
            subject=subject,
            alert_type="anomalia",
            severity="critical",
            current_percentage=current,
            context={"anomaly": True, "window": alert_settings.anomaly_moving_avg_days},
        ))

    return requests


async def raise_alerts(
    repo: AlertRepository,
    requests: Sequence[AlertRequest],
    now: datetime | None = None,
) -> list[MonitoringAlert]:
    created = []
    for request in requests:
        alert = await persist_alert(repo, request, now=now)
        if alert is not None:
            created.append(alert)
    return created
