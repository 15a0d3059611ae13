"""Modèles Cheval et intervalles de rappel / Horse and recall interval models."""

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Horse(Base):
    __tablename__ = "horses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    breed: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Horse {self.name}>"


class HorseServiceInterval(Base):
    """
    Surcharge de l'intervalle de rappel / Recall interval override.
    service_id NULL = surcharge (cheval, prestataire) pour toutes ses prestations /
    service_id NULL = (horse, provider) override covering every service of the provider.
    """

    __tablename__ = "horse_service_intervals"
    __table_args__ = (UniqueConstraint("horse_id", "provider_id", "service_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    horse_id: Mapped[int] = mapped_column(ForeignKey("horses.id"), nullable=False)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id"), nullable=False)
    service_id: Mapped[int | None] = mapped_column(ForeignKey("services.id"))
    revisit_interval_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(500))
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601

    def __repr__(self) -> str:
        return f"<HorseServiceInterval horse={self.horse_id} service={self.service_id} {self.revisit_interval_weeks}w>"
