import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from techub.models.base import Base, TimestampMixin, generate_uuid


class BacklogItem(TimestampMixin, Base):
    """A currently open ticket, as loaded by the backlog ingestion job."""

    __tablename__ = "backlog_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    reference: Mapped[str | None] = mapped_column(String(100), index=True)
    queue: Mapped[str | None] = mapped_column(String(255), index=True)
    status: Mapped[str | None] = mapped_column(String(100))
    project_name: Mapped[str | None] = mapped_column(String(255))
    project_code: Mapped[str | None] = mapped_column(String(100))
    company_name: Mapped[str | None] = mapped_column(String(255))
    client_status: Mapped[str | None] = mapped_column(String(100))
    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    days_open: Mapped[int | None] = mapped_column(Integer)
    incident_type: Mapped[str | None] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(2))
    city: Mapped[str | None] = mapped_column(String(100))
    assigned_account: Mapped[str | None] = mapped_column(String(255))


class BacklogDailyTotal(TimestampMixin, Base):
    """One persisted backlog snapshot per calendar day."""

    __tablename__ = "backlog_daily_totals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    data_ref: Mapped[date] = mapped_column(Date, unique=True, nullable=False, index=True)
    total_backlog: Mapped[int] = mapped_column(Integer, nullable=False)
    above_30: Mapped[int] = mapped_column(Integer, nullable=False)
    above_50: Mapped[int] = mapped_column(Integer, nullable=False)
    average_age: Mapped[float] = mapped_column(Float, nullable=False)
