import uuid

from sqlalchemy import Boolean, Float, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from techub.models.base import Base, TimestampMixin, generate_uuid


class PresentationSettings(TimestampMixin, Base):
    """Rotating wall-display configuration, one row per monitoring type."""

    __tablename__ = "presentation_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=generate_uuid)
    monitoring_type: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    companies_per_page: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    interval_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    min_percentage: Mapped[float | None] = mapped_column(Float)
    max_percentage: Mapped[float | None] = mapped_column(Float)
    ignore_green: Mapped[bool] = mapped_column(Boolean, default=False)
    ignore_yellow: Mapped[bool] = mapped_column(Boolean, default=False)
    ignore_red: Mapped[bool] = mapped_column(Boolean, default=False)
    threshold_excellent: Mapped[float] = mapped_column(Float, nullable=False, default=98.0)
    threshold_attention: Mapped[float] = mapped_column(Float, nullable=False, default=80.0)
