"""Modèles Prestataire et Prestation / Provider and service models."""

from sqlalchemy import Boolean, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.config import settings
from app.database import Base


class Provider(Base):
    """Prestataire mobile (maréchal-ferrant, vétérinaire...) / Mobile service provider."""

    __tablename__ = "providers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)
    business_name: Mapped[str] = mapped_column(String(150), nullable=False)
    address: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(100))
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    # Jamais supprimé physiquement / Never hard-deleted, only deactivated
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    accepting_new_customers: Mapped[bool] = mapped_column(Boolean, default=True)

    # Réservations récurrentes / Recurring bookings
    recurring_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    max_series_occurrences: Mapped[int] = mapped_column(
        Integer, default=settings.DEFAULT_MAX_SERIES_OCCURRENCES
    )

    def __repr__(self) -> str:
        return f"<Provider {self.business_name}>"


class Service(Base):
    """Prestation proposée par un prestataire / Service offered by a provider."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    # Durée figée dès qu'une réservation y fait référence / Frozen once referenced by a booking
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    recommended_interval_weeks: Mapped[int | None] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<Service {self.name} ({self.duration_minutes} min)>"
