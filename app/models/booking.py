"""Modèle Réservation / Booking model."""

import enum

from sqlalchemy import Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class BookingStatus(str, enum.Enum):
    """Statut de la réservation / Booking status."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuts qui occupent un créneau / Statuses that hold a time slot
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_provider_date", "provider_id", "booking_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"), nullable=False)
    customer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    service_id: Mapped[int] = mapped_column(ForeignKey("services.id"), nullable=False)
    booking_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    status: Mapped[BookingStatus] = mapped_column(Enum(BookingStatus), default=BookingStatus.PENDING)

    horse_id: Mapped[int | None] = mapped_column(ForeignKey("horses.id"))
    route_order_id: Mapped[int | None] = mapped_column(ForeignKey("route_orders.id"))
    series_id: Mapped[int | None] = mapped_column(ForeignKey("booking_series.id"))
    # Renseigné pour une réservation manuelle / Set for a manual booking
    created_by_provider_id: Mapped[int | None] = mapped_column(ForeignKey("providers.id"))

    # Lieu du rendez-vous (coordonnées client) / Appointment location (customer coordinates)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    customer_notes: Mapped[str | None] = mapped_column(Text)
    cancellation_message: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    def __repr__(self) -> str:
        return f"<Booking {self.booking_date} {self.start_time}-{self.end_time} provider={self.provider_id}>"
