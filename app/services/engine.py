"""
Moteur de planification / Scheduling engine.
Assemble les services sur un store et un lecteur de feature flags injectés ;
c'est la surface appelée par l'API.
Wires the services over an injected store and feature-flag reader; this is
the surface the API calls.
"""

from typing import Sequence

from app.models.booking import Booking
from app.services.availability_checker import AvailabilityChecker, AvailabilityQuery, AvailabilityResult
from app.services.booking_guard import BookingConflictGuard
from app.services.booking_service import BookingRequest, BookingService
from app.services.interval_resolver import IntervalResolver, ReminderService
from app.services.ports import DistanceFn, FeatureFlagCheck, SchedulingStore
from app.services.results import Result
from app.services.route_sequencer import RouteCreation, RouteService
from app.services.series_expander import SeriesExpander, SeriesOutcome, SeriesRequest
from app.utils.geo import haversine


class SchedulingEngine:

    def __init__(self, store: SchedulingStore, is_feature_enabled: FeatureFlagCheck, distance_fn: DistanceFn = haversine):
        self.store = store
        self.checker = AvailabilityChecker(store, distance_fn=distance_fn)
        self.guard = BookingConflictGuard(store)
        self.bookings = BookingService(store, checker=self.checker, guard=self.guard)
        self.intervals = IntervalResolver(store)
        self.series = SeriesExpander(store, self.bookings, is_feature_enabled, interval_resolver=self.intervals)
        self.routes = RouteService(store, distance_fn=distance_fn)
        self.reminders = ReminderService(store, self.intervals)

    async def check_availability(self, query: AvailabilityQuery) -> Result[AvailabilityResult]:
        return await self.bookings.check_availability(query)

    async def create_booking(self, request: BookingRequest) -> Result[Booking]:
        return await self.bookings.create_booking(request)

    async def create_series(self, request: SeriesRequest) -> Result[SeriesOutcome]:
        return await self.series.create_series(request)

    async def create_route(
        self,
        provider_id: int,
        order_ids: Sequence[int],
        route_date: str,
        start_time: str,
        route_name: str | None = None,
    ) -> Result[RouteCreation]:
        return await self.routes.create_route(provider_id, order_ids, route_date, start_time, route_name)

    async def resolve_interval(
        self, horse_id: int | None, provider_id: int, service_id: int | None, default_weeks: int | None
    ) -> int | None:
        return await self.intervals.resolve(horse_id, provider_id, service_id, default_weeks)
