"""Modèle Demande de passage flexible / Flexible route order model."""

import enum

from sqlalchemy import Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class RouteOrderPriority(str, enum.Enum):
    """Priorité / Priority."""
    NORMAL = "normal"
    URGENT = "urgent"


class RouteOrderStatus(str, enum.Enum):
    """Statut de la demande / Order status."""
    PENDING = "pending"
    IN_ROUTE = "in_route"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RouteOrder(Base):
    """Demande client sans heure fixe, sur une plage de dates / Date-ranged request without fixed time."""

    __tablename__ = "route_orders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    service_type: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    number_of_horses: Mapped[int] = mapped_column(Integer, default=1)
    date_from: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    date_to: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    priority: Mapped[RouteOrderPriority] = mapped_column(
        Enum(RouteOrderPriority), default=RouteOrderPriority.NORMAL
    )
    status: Mapped[RouteOrderStatus] = mapped_column(Enum(RouteOrderStatus), default=RouteOrderStatus.PENDING)
    special_instructions: Mapped[str | None] = mapped_column(Text)
    contact_phone: Mapped[str | None] = mapped_column(String(30))
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    def __repr__(self) -> str:
        return f"<RouteOrder {self.id} - {self.address}>"
