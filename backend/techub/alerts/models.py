import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from techub.models.base import Base, TimestampMixin, generate_uuid, utcnow

MONITORING_TYPES = ("mps", "sla_fila", "sla_projeto")
ALERT_TYPES = ("limite", "tendencia", "anomalia")
SEVERITIES = ("critical", "warning", "info")


class MonitoringAlert(TimestampMixin, Base):
    __tablename__ = "monitoring_alerts"
    __table_args__ = (
        Index("ix_monitoring_alerts_key", "monitoring_type", "subject", "alert_type", "resolved"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    monitoring_type: Mapped[str] = mapped_column(String(20), nullable=False)  # mps, sla_fila, sla_projeto
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    alert_type: Mapped[str] = mapped_column(String(20), nullable=False)  # limite, tendencia, anomalia
    severity: Mapped[str] = mapped_column(String(20), nullable=False)  # critical, warning, info
    current_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    context: Mapped[dict | None] = mapped_column(JSON)
    detected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    resolution_comment: Mapped[str | None] = mapped_column(Text)


class AlertSettings(TimestampMixin, Base):
    __tablename__ = "monitoring_alert_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    monitoring_type: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    anomaly_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    anomaly_moving_avg_days: Mapped[int] = mapped_column(Integer, default=7)
    anomaly_stddev_multiplier: Mapped[float] = mapped_column(Float, default=2.0)
    trend_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    trend_consecutive_periods: Mapped[int] = mapped_column(Integer, default=3)
