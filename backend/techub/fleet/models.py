import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from techub.models.base import Base, TimestampMixin, generate_uuid, utcnow


class FleetReading(TimestampMixin, Base):
    """Device-park monitoring count for one company, as recorded by the collector."""

    __tablename__ = "fleet_readings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    company: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    total_base: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_unmonitored: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
