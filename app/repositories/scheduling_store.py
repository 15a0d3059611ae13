"""
Implémentation SQLAlchemy du SchedulingStore / SQLAlchemy implementation of the SchedulingStore.

Les lectures ouvrent une session courte ; run_in_transaction ouvre une session
avec session.begin() et passe au callback un store lié à cette transaction.
Reads open a short-lived session; run_in_transaction opens one session with
session.begin() and hands the callback a store bound to that transaction.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Sequence, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import WRITE_LOCK_OPTION
from app.models.availability import AvailabilityException, AvailabilitySchedule
from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from app.models.booking_series import BookingSeries
from app.models.horse import HorseServiceInterval
from app.models.provider import Provider, Service
from app.models.route import Route
from app.models.route_order import RouteOrder
from app.models.route_stop import RouteStop


T = TypeVar("T")


class SqlSchedulingStore:
    """Store de planification adossé à SQLAlchemy / SQLAlchemy-backed scheduling store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], session: AsyncSession | None = None):
        self._session_factory = session_factory
        self._session = session

    @property
    def in_transaction(self) -> bool:
        return self._session is not None

    @asynccontextmanager
    async def _use_session(self) -> AsyncIterator[AsyncSession]:
        """Session de la transaction en cours, sinon session courte / Current tx session, else a short one."""
        if self._session is not None:
            yield self._session
        else:
            async with self._session_factory() as session:
                yield session

    async def run_in_transaction(self, fn: Callable[[SqlSchedulingStore], Awaitable[T]]) -> T:
        if self._session is not None:
            return await fn(self)
        async with self._session_factory() as session:
            async with session.begin():
                # SQLite : BEGIN IMMEDIATE ; PostgreSQL : les SELECT ... FOR UPDATE suffisent
                # SQLite: BEGIN IMMEDIATE; PostgreSQL: SELECT ... FOR UPDATE is enough
                await session.connection(execution_options={WRITE_LOCK_OPTION: True})
                return await fn(type(self)(self._session_factory, session))

    # =====================================================================
    # Lectures / Reads
    # =====================================================================

    async def get_provider(self, provider_id: int) -> Provider | None:
        async with self._use_session() as session:
            return await session.get(Provider, provider_id)

    async def get_service(self, service_id: int) -> Service | None:
        async with self._use_session() as session:
            return await session.get(Service, service_id)

    async def get_availability_exception(self, provider_id: int, date: str) -> AvailabilityException | None:
        async with self._use_session() as session:
            result = await session.execute(
                select(AvailabilityException).where(
                    AvailabilityException.provider_id == provider_id,
                    AvailabilityException.date == date,
                )
            )
            return result.scalar_one_or_none()

    async def get_weekly_schedule(self, provider_id: int, day_of_week: int) -> AvailabilitySchedule | None:
        async with self._use_session() as session:
            result = await session.execute(
                select(AvailabilitySchedule).where(
                    AvailabilitySchedule.provider_id == provider_id,
                    AvailabilitySchedule.day_of_week == day_of_week,
                )
            )
            return result.scalar_one_or_none()

    async def find_overlapping_bookings(self, provider_id: int, date: str) -> list[Booking]:
        async with self._use_session() as session:
            result = await session.execute(
                select(Booking)
                .where(
                    Booking.provider_id == provider_id,
                    Booking.booking_date == date,
                    Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                )
                .order_by(Booking.start_time)
            )
            return list(result.scalars().all())

    async def get_booking(self, booking_id: int) -> Booking | None:
        async with self._use_session() as session:
            return await session.get(Booking, booking_id)

    async def get_series(self, series_id: int) -> BookingSeries | None:
        async with self._use_session() as session:
            return await session.get(BookingSeries, series_id)

    async def find_series_bookings(self, series_id: int, from_date: str) -> list[Booking]:
        async with self._use_session() as session:
            result = await session.execute(
                select(Booking)
                .where(
                    Booking.series_id == series_id,
                    Booking.booking_date >= from_date,
                    Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                )
                .order_by(Booking.booking_date)
            )
            return list(result.scalars().all())

    async def find_horse_intervals(self, horse_id: int, provider_id: int) -> list[HorseServiceInterval]:
        async with self._use_session() as session:
            result = await session.execute(
                select(HorseServiceInterval).where(
                    HorseServiceInterval.horse_id == horse_id,
                    HorseServiceInterval.provider_id == provider_id,
                )
            )
            return list(result.scalars().all())

    async def find_completed_bookings(self) -> list[tuple[Booking, Service]]:
        async with self._use_session() as session:
            result = await session.execute(
                select(Booking, Service)
                .join(Service, Booking.service_id == Service.id)
                .where(Booking.status == BookingStatus.COMPLETED)
                .order_by(Booking.booking_date)
            )
            return [(booking, service) for booking, service in result.all()]

    async def get_route_orders(self, order_ids: Sequence[int]) -> list[RouteOrder]:
        async with self._use_session() as session:
            query = select(RouteOrder).where(RouteOrder.id.in_(list(order_ids)))
            if self.in_transaction:
                query = query.with_for_update()
            result = await session.execute(query)
            return list(result.scalars().all())

    # =====================================================================
    # Écritures / Writes
    # =====================================================================

    async def lock_provider(self, provider_id: int) -> None:
        """Verrou ligne prestataire (PostgreSQL) / Provider row lock (no-op on SQLite)."""
        async with self._use_session() as session:
            await session.execute(select(Provider.id).where(Provider.id == provider_id).with_for_update())

    def _require_transaction(self) -> None:
        if self._session is None:
            raise RuntimeError("Scheduling writes must run inside run_in_transaction()")

    async def _add(self, obj: T) -> T:
        self._require_transaction()
        async with self._use_session() as session:
            session.add(obj)
            await session.flush()
            return obj

    async def _apply(self, obj: T, changes: dict[str, Any]) -> T:
        self._require_transaction()
        async with self._use_session() as session:
            obj = await session.merge(obj)
            for key, value in changes.items():
                setattr(obj, key, value)
            await session.flush()
            return obj

    async def create_booking(self, data: dict[str, Any]) -> Booking:
        return await self._add(Booking(**data))

    async def update_booking(self, booking: Booking, **changes: Any) -> Booking:
        return await self._apply(booking, changes)

    async def create_series(self, data: dict[str, Any]) -> BookingSeries:
        return await self._add(BookingSeries(**data))

    async def update_series(self, series: BookingSeries, **changes: Any) -> BookingSeries:
        return await self._apply(series, changes)

    async def link_bookings_to_series(self, booking_ids: Sequence[int], series_id: int) -> None:
        self._require_transaction()
        async with self._use_session() as session:
            await session.execute(
                update(Booking).where(Booking.id.in_(list(booking_ids))).values(series_id=series_id)
            )

    async def create_route(self, data: dict[str, Any]) -> Route:
        return await self._add(Route(**data))

    async def create_route_stop(self, data: dict[str, Any]) -> RouteStop:
        return await self._add(RouteStop(**data))

    async def update_route_order(self, order: RouteOrder, **changes: Any) -> RouteOrder:
        return await self._apply(order, changes)
