"""Modèles Disponibilités / Availability models (weekly hours and date exceptions)."""

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class AvailabilitySchedule(Base):
    """Horaires hebdomadaires / Weekly opening hours (one row per weekday)."""

    __tablename__ = "availability_schedules"
    __table_args__ = (UniqueConstraint("provider_id", "day_of_week"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = lundi / Monday
    start_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<AvailabilitySchedule provider={self.provider_id} day={self.day_of_week}>"


class AvailabilityException(Base):
    """Exception à une date précise / Per-date override (closed day or restricted window)."""

    __tablename__ = "availability_exceptions"
    __table_args__ = (UniqueConstraint("provider_id", "date"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    is_closed: Mapped[bool] = mapped_column(Boolean, default=True)
    start_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    reason: Mapped[str | None] = mapped_column(String(200))

    def __repr__(self) -> str:
        return f"<AvailabilityException provider={self.provider_id} {self.date}>"
