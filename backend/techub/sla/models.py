import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from techub.models.base import Base, TimestampMixin, generate_uuid, utcnow

SLA_KINDS = ("fila", "projeto")


class SLASnapshot(TimestampMixin, Base):
    """Inside/outside SLA counts for one queue or project at a point in time."""

    __tablename__ = "sla_snapshots"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # fila, projeto
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    inside: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    outside: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)


class SLATicket(TimestampMixin, Base):
    """Per-ticket SLA detail; closed_at feeds the closure side of the operational flow."""

    __tablename__ = "sla_tickets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    reference: Mapped[str | None] = mapped_column(String(100), index=True)
    queue: Mapped[str | None] = mapped_column(String(255))
    project_name: Mapped[str | None] = mapped_column(String(255))
    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    sla_lost: Mapped[bool] = mapped_column(Boolean, default=False)


class SLAMeta(TimestampMixin, Base):
    __tablename__ = "sla_metas"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    identifier: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    meta_excelente: Mapped[float] = mapped_column(Float, nullable=False)
    meta_atencao: Mapped[float] = mapped_column(Float, nullable=False)
