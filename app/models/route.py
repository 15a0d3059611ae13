"""Modèle Tournée prestataire / Provider route model."""

import enum

from sqlalchemy import Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class RouteStatus(str, enum.Enum):
    """Statut de la tournée / Route status."""
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Route(Base):
    __tablename__ = "routes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"), nullable=False)
    route_name: Mapped[str] = mapped_column(String(150), nullable=False)
    route_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    status: Mapped[RouteStatus] = mapped_column(Enum(RouteStatus), default=RouteStatus.PLANNED)
    total_distance_km: Mapped[float] = mapped_column(Numeric(10, 1), default=0)
    total_duration_minutes: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    # Relations
    stops: Mapped[list["RouteStop"]] = relationship(
        back_populates="route", cascade="all, delete-orphan", order_by="RouteStop.stop_order"
    )

    def __repr__(self) -> str:
        return f"<Route {self.route_name} - {self.route_date}>"
