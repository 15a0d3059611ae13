"""
Collaborateurs consommés par le moteur de planification / Collaborators consumed by the scheduling engine.
Les services reçoivent ces interfaces par injection, jamais de session globale.
Services receive these interfaces by injection, never an ambient session.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, Sequence, TypeVar

from app.models.availability import AvailabilityException, AvailabilitySchedule
from app.models.booking import Booking
from app.models.booking_series import BookingSeries
from app.models.horse import HorseServiceInterval
from app.models.provider import Provider, Service
from app.models.route import Route
from app.models.route_order import RouteOrder
from app.models.route_stop import RouteStop

T = TypeVar("T")

FeatureFlagCheck = Callable[[str], Awaitable[bool]]
DistanceFn = Callable[[float, float, float, float], float]


class SchedulingStore(Protocol):
    """Accès persistance du moteur / Engine persistence access."""

    # -- Lectures / Reads --
    async def get_provider(self, provider_id: int) -> Provider | None: ...

    async def get_service(self, service_id: int) -> Service | None: ...

    async def get_availability_exception(self, provider_id: int, date: str) -> AvailabilityException | None: ...

    async def get_weekly_schedule(self, provider_id: int, day_of_week: int) -> AvailabilitySchedule | None: ...

    async def find_overlapping_bookings(self, provider_id: int, date: str) -> list[Booking]:
        """Réservations pending/confirmed du prestataire à cette date / Active bookings on that date."""
        ...

    async def get_booking(self, booking_id: int) -> Booking | None: ...

    async def get_series(self, series_id: int) -> BookingSeries | None: ...

    async def find_series_bookings(self, series_id: int, from_date: str) -> list[Booking]:
        """Réservations actives de la série à partir d'une date / Active series bookings from a date."""
        ...

    async def find_horse_intervals(self, horse_id: int, provider_id: int) -> list[HorseServiceInterval]: ...

    async def find_completed_bookings(self) -> list[tuple[Booking, Service]]: ...

    async def get_route_orders(self, order_ids: Sequence[int]) -> list[RouteOrder]: ...

    # -- Écritures (dans une transaction) / Writes (inside a transaction) --
    async def lock_provider(self, provider_id: int) -> None: ...

    async def create_booking(self, data: dict[str, Any]) -> Booking: ...

    async def update_booking(self, booking: Booking, **changes: Any) -> Booking: ...

    async def create_series(self, data: dict[str, Any]) -> BookingSeries: ...

    async def update_series(self, series: BookingSeries, **changes: Any) -> BookingSeries: ...

    async def link_bookings_to_series(self, booking_ids: Sequence[int], series_id: int) -> None: ...

    async def create_route(self, data: dict[str, Any]) -> Route: ...

    async def create_route_stop(self, data: dict[str, Any]) -> RouteStop: ...

    async def update_route_order(self, order: RouteOrder, **changes: Any) -> RouteOrder: ...

    async def run_in_transaction(self, fn: Callable[[SchedulingStore], Awaitable[T]]) -> T:
        """Exécuter fn atomiquement / Run fn atomically (commit on return, rollback on exception)."""
        ...
