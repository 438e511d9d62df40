import uuid
from datetime import date, datetime, timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from techub.alerts.models import ALERT_TYPES, AlertSettings, MonitoringAlert
from techub.alerts.repository import AlertKey, AlertRepository
from techub.alerts.schemas import AlertRequest, AlertSettingsUpdate
from techub.config import settings
from techub.models.base import ensure_utc, utcnow

logger = structlog.get_logger()

DEFAULT_ALERT_SETTINGS = {
    "anomaly_enabled": True,
    "anomaly_moving_avg_days": 7,
    "anomaly_stddev_multiplier": 2.0,
    "trend_enabled": True,
    "trend_consecutive_periods": 3,
}


async def persist_alert(
    repo: AlertRepository,
    request: AlertRequest,
    now: datetime | None = None,
    window: timedelta | None = None,
) -> MonitoringAlert | None:
    """Raise an alert unless an equivalent one is still active inside the window.

    At most one read and one insert. Never raises: it runs inside metric
    refreshes, which must complete even when alert storage is failing.
    Returns the new alert, or None when suppressed or on failure.
    """
    now = now or utcnow()
    window = window or timedelta(hours=settings.ALERT_DEDUP_WINDOW_HOURS)
    key = AlertKey(request.monitoring_type, request.subject, request.alert_type)

    try:
        existing = await repo.find_latest_by_key(key, since=now - window)
    except Exception:
        logger.exception("alert_check_failed", monitoring_type=key.monitoring_type, subject=key.subject)
        await _safe_rollback(repo)
        return None

    if existing is not None:
        logger.debug(
            "alert_suppressed",
            monitoring_type=key.monitoring_type,
            subject=key.subject,
            alert_type=key.alert_type,
            existing_id=str(existing.id),
        )
        return None

    alert = MonitoringAlert(
        monitoring_type=request.monitoring_type,
        subject=request.subject,
        alert_type=request.alert_type,
        severity=request.severity,
        current_percentage=round(request.current_percentage, 2),
        context=request.context,
        detected_at=now,
    )
    try:
        alert = await repo.add(alert)
    except Exception:
        logger.exception("alert_insert_failed", monitoring_type=key.monitoring_type, subject=key.subject)
        await _safe_rollback(repo)
        return None

    logger.info(
        "alert_created",
        monitoring_type=alert.monitoring_type,
        subject=alert.subject,
        alert_type=alert.alert_type,
        severity=alert.severity,
    )
    return alert


async def _safe_rollback(repo: AlertRepository) -> None:
    try:
        await repo.rollback()
    except Exception:
        logger.exception("alert_rollback_failed")


async def resolve_alert(
    repo: AlertRepository,
    alert: MonitoringAlert,
    user_id: uuid.UUID,
    comment: str,
    now: datetime | None = None,
) -> MonitoringAlert | None:
    """Mark an active alert as treated. Returns None if it was already resolved."""
    if alert.resolved:
        return None
    alert.resolved = True
    alert.resolved_at = now or utcnow()
    alert.resolved_by = user_id
    alert.resolution_comment = comment.strip()
    alert = await repo.save(alert)
    logger.info("alert_resolved", alert_id=str(alert.id), resolved_by=str(user_id))
    return alert


def summarize_alerts(alerts: list[MonitoringAlert], today: date | None = None) -> dict:
    today = today or utcnow().date()
    active = [a for a in alerts if not a.resolved]
    resolved = [a for a in alerts if a.resolved and a.resolved_at is not None]

    response_minutes = [
        (ensure_utc(a.resolved_at) - ensure_utc(a.detected_at)).total_seconds() / 60
        for a in resolved
    ]
    avg_minutes = round(sum(response_minutes) / len(response_minutes)) if response_minutes else 0

    return {
        "active": len(active),
        "critical": sum(1 for a in active if a.severity == "critical"),
        "by_type": {t: sum(1 for a in active if a.alert_type == t) for t in ALERT_TYPES},
        "resolved_today": sum(1 for a in resolved if ensure_utc(a.resolved_at).date() == today),
        "avg_response_minutes": avg_minutes,
    }


async def get_alert_settings(db: AsyncSession, monitoring_type: str) -> AlertSettings:
    """Stored settings for the type, or an unsaved instance carrying the defaults."""
    result = await db.execute(select(AlertSettings).where(AlertSettings.monitoring_type == monitoring_type))
    stored = result.scalar_one_or_none()
    if stored is not None:
        return stored
    return AlertSettings(monitoring_type=monitoring_type, **DEFAULT_ALERT_SETTINGS)


async def upsert_alert_settings(
    db: AsyncSession,
    monitoring_type: str,
    data: AlertSettingsUpdate,
) -> AlertSettings:
    result = await db.execute(select(AlertSettings).where(AlertSettings.monitoring_type == monitoring_type))
    stored = result.scalar_one_or_none()
    if stored is None:
        stored = AlertSettings(monitoring_type=monitoring_type)
        db.add(stored)
    for field, value in data.model_dump().items():
        setattr(stored, field, value)
    await db.commit()
    await db.refresh(stored)
    logger.info("alert_settings_saved", monitoring_type=monitoring_type)
    return stored
