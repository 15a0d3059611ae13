"""Modèle Série de réservations / Booking series model."""

import enum

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class SeriesStatus(str, enum.Enum):
    """Statut de la série / Series status."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class BookingSeries(Base):
    """Demande de réservation récurrente / One recurring-booking request."""

    __tablename__ = "booking_series"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"), nullable=False)
    service_id: Mapped[int] = mapped_column(ForeignKey("services.id"), nullable=False)
    horse_id: Mapped[int | None] = mapped_column(ForeignKey("horses.id"))
    created_by_provider_id: Mapped[int | None] = mapped_column(ForeignKey("providers.id"))
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    interval_weeks: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-52
    total_occurrences: Mapped[int] = mapped_column(Integer, nullable=False)  # 2-52
    # Résumé écrit une seule fois / Write-once summary, never recomputed
    created_count: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[SeriesStatus] = mapped_column(Enum(SeriesStatus), default=SeriesStatus.ACTIVE)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601
    cancelled_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    def __repr__(self) -> str:
        return f"<BookingSeries {self.id} every {self.interval_weeks}w x{self.total_occurrences}>"
