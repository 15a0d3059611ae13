"""Modèle Arrêt de tournée / Route stop model."""

import enum

from sqlalchemy import Enum, Float, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class RouteStopStatus(str, enum.Enum):
    """Statut opérationnel de l'arrêt / Operational stop status."""
    PENDING = "pending"
    ARRIVED = "arrived"
    DONE = "done"
    PROBLEM = "problem"


class RouteStop(Base):
    __tablename__ = "route_stops"
    __table_args__ = (UniqueConstraint("route_id", "stop_order"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    route_id: Mapped[int] = mapped_column(ForeignKey("routes.id"), nullable=False)
    route_order_id: Mapped[int] = mapped_column(ForeignKey("route_orders.id"), nullable=False)
    stop_order: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based
    address: Mapped[str | None] = mapped_column(String(255))
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    estimated_arrival: Mapped[str] = mapped_column(String(16), nullable=False)  # YYYY-MM-DDTHH:MM
    estimated_departure: Mapped[str] = mapped_column(String(16), nullable=False)  # YYYY-MM-DDTHH:MM
    estimated_duration_min: Mapped[int] = mapped_column(Integer, nullable=False)
    distance_from_previous_km: Mapped[float | None] = mapped_column(Numeric(10, 2))
    travel_minutes_from_previous: Mapped[int | None] = mapped_column(Integer)

    # Suivi d'exécution / Execution tracking
    status: Mapped[RouteStopStatus] = mapped_column(Enum(RouteStopStatus), default=RouteStopStatus.PENDING)
    problem_note: Mapped[str | None] = mapped_column(Text)

    # Relations
    route: Mapped["Route"] = relationship(back_populates="stops")

    def __repr__(self) -> str:
        return f"<RouteStop route={self.route_id} seq={self.stop_order} order={self.route_order_id}>"
