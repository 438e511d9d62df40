"""Narrow storage interface for monitoring alerts.

Callers describe what they want with AlertKey / AlertQuery values; only this
module knows how those become SQL.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from techub.alerts.models import MonitoringAlert


@dataclass(frozen=True)
class AlertKey:
    monitoring_type: str
    subject: str
    alert_type: str


@dataclass(frozen=True)
class AlertQuery:
    monitoring_type: str | None = None
    subject: str | None = None
    alert_type: str | None = None
    severity: str | None = None
    resolved: bool | None = None
    detected_from: datetime | None = None
    detected_to: datetime | None = None
    search: str | None = None
    limit: int | None = None
    offset: int = 0


class AlertRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_latest_by_key(self, key: AlertKey, since: datetime) -> MonitoringAlert | None:
        """Most recent unresolved alert for the key detected at or after ``since``."""
        result = await self.db.execute(
            select(MonitoringAlert)
            .where(
                MonitoringAlert.monitoring_type == key.monitoring_type,
                MonitoringAlert.subject == key.subject,
                MonitoringAlert.alert_type == key.alert_type,
                MonitoringAlert.resolved == False,  # noqa: E712
                MonitoringAlert.detected_at >= since,
            )
            .order_by(MonitoringAlert.detected_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    def _filtered(self, stmt, query: AlertQuery):
        if query.monitoring_type:
            stmt = stmt.where(MonitoringAlert.monitoring_type == query.monitoring_type)
        if query.subject:
            stmt = stmt.where(MonitoringAlert.subject == query.subject)
        if query.alert_type:
            stmt = stmt.where(MonitoringAlert.alert_type == query.alert_type)
        if query.severity:
            stmt = stmt.where(MonitoringAlert.severity == query.severity)
        if query.resolved is not None:
            stmt = stmt.where(MonitoringAlert.resolved == query.resolved)
        if query.detected_from is not None:
            stmt = stmt.where(MonitoringAlert.detected_at >= query.detected_from)
        if query.detected_to is not None:
            stmt = stmt.where(MonitoringAlert.detected_at <= query.detected_to)
        if query.search:
            stmt = stmt.where(func.lower(MonitoringAlert.subject).contains(query.search.lower()))
        return stmt

    async def find_in_range(self, query: AlertQuery) -> list[MonitoringAlert]:
        stmt = self._filtered(select(MonitoringAlert), query).order_by(MonitoringAlert.detected_at.desc())
        if query.offset:
            stmt = stmt.offset(query.offset)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self, query: AlertQuery) -> int:
        result = await self.db.execute(
            self._filtered(select(func.count()).select_from(MonitoringAlert), query)
        )
        return result.scalar_one()

    async def get(self, alert_id: uuid.UUID) -> MonitoringAlert | None:
        result = await self.db.execute(select(MonitoringAlert).where(MonitoringAlert.id == alert_id))
        return result.scalar_one_or_none()

    async def add(self, alert: MonitoringAlert) -> MonitoringAlert:
        self.db.add(alert)
        await self.db.commit()
        await self.db.refresh(alert)
        return alert

    async def save(self, alert: MonitoringAlert) -> MonitoringAlert:
        await self.db.commit()
        await self.db.refresh(alert)
        return alert

    async def rollback(self) -> None:
        await self.db.rollback()
