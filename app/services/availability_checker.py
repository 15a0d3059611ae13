"""
Vérification de disponibilité / Availability checker.

Contrôle en lecture seule, indicatif : il donne un retour rapide au client mais
n'est pas la garde d'exactitude (voir booking_guard.BookingConflictGuard).
Read-only, advisory check: fast client feedback, not the correctness guard
(see booking_guard.BookingConflictGuard).

Ordre des règles / Rule order:
1. exception du jour fermée / closed date exception
2. fenêtre restreinte (exception, sinon horaires hebdomadaires) / restricted window
3. chevauchement avec une réservation active / overlap with an active booking
4. temps de trajet vers les réservations adjacentes / travel time to adjacent bookings
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from app.config import settings
from app.models.availability import AvailabilityException, AvailabilitySchedule
from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking
from app.models.provider import Provider
from app.services.ports import DistanceFn, SchedulingStore
from app.services.results import ErrorCode
from app.services.time_calculator import TimeCalculatorService
from app.utils.geo import haversine

logger = logging.getLogger(__name__)

REASON_CLOSED = "provider closed"
REASON_OUTSIDE_HOURS = "outside available hours"
REASON_BOOKED = "slot already booked"
REASON_TRAVEL = "insufficient travel time"

_to_minutes = TimeCalculatorService.time_to_minutes


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    @classmethod
    def from_coordinates(cls, latitude: float | None, longitude: float | None) -> Location | None:
        if latitude is None or longitude is None:
            return None
        return cls(latitude, longitude)


@dataclass(frozen=True)
class AvailabilityQuery:
    """Créneau candidat / Candidate window [start_time, end_time)."""
    provider_id: int
    booking_date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    location: Location | None = None
    include_travel_time: bool = True


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: str | None = None
    code: ErrorCode | None = None
    required_gap_minutes: int | None = None
    actual_gap_minutes: int | None = None

    @classmethod
    def unavailable(cls, reason: str, code: ErrorCode, **gaps: int) -> AvailabilityResult:
        return cls(available=False, reason=reason, code=code, **gaps)


def overlaps(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Chevauchement d'intervalles semi-ouverts / Half-open interval overlap.

    [s1,e1) et [s2,e2) se chevauchent ssi s1 < e2 et s2 < e1 ; des bornes
    qui se touchent ne se chevauchent pas / touching boundaries do not overlap.
    """
    return _to_minutes(start1) < _to_minutes(end2) and _to_minutes(start2) < _to_minutes(end1)


def find_conflict(start_time: str, end_time: str, bookings: Sequence[Booking]) -> Booking | None:
    """Première réservation active qui chevauche / First active booking that overlaps."""
    for booking in bookings:
        if booking.status not in ACTIVE_BOOKING_STATUSES:
            continue
        if overlaps(start_time, end_time, booking.start_time, booking.end_time):
            return booking
    return None


class AvailabilityChecker:
    """Décide si un créneau est réservable / Decides whether a window is bookable."""

    def __init__(
        self,
        store: SchedulingStore,
        average_speed_kmh: float = settings.AVERAGE_SPEED_KMH,
        margin_factor: float = settings.TRAVEL_MARGIN_FACTOR,
        distance_fn: DistanceFn = haversine,
    ):
        self.store = store
        self.average_speed_kmh = average_speed_kmh
        self.margin_factor = margin_factor
        self.distance_fn = distance_fn

    async def check(self, query: AvailabilityQuery) -> AvailabilityResult:
        """Charger le contexte du jour puis évaluer / Load the day's context, then evaluate."""
        provider = await self.store.get_provider(query.provider_id)
        exception = await self.store.get_availability_exception(query.provider_id, query.booking_date)
        schedule = None
        if exception is None:
            weekday = TimeCalculatorService.parse_date(query.booking_date).weekday()
            schedule = await self.store.get_weekly_schedule(query.provider_id, weekday)
        bookings = await self.store.find_overlapping_bookings(query.provider_id, query.booking_date)

        result = self.evaluate(query, bookings, exception=exception, schedule=schedule, provider=provider)
        if not result.available:
            logger.debug(
                "Slot %s %s-%s unavailable for provider %s: %s",
                query.booking_date, query.start_time, query.end_time, query.provider_id, result.reason,
            )
        return result

    def evaluate(
        self,
        query: AvailabilityQuery,
        bookings: Sequence[Booking],
        exception: AvailabilityException | None = None,
        schedule: AvailabilitySchedule | None = None,
        provider: Provider | None = None,
    ) -> AvailabilityResult:
        """Évaluation pure, sans I/O / Pure evaluation, no I/O."""
        # 1-2. Exception du jour, sinon horaires hebdomadaires / Date exception, else weekly hours
        opening = exception if exception is not None else schedule
        if opening is not None:
            if opening.is_closed:
                return AvailabilityResult.unavailable(REASON_CLOSED, ErrorCode.PROVIDER_CLOSED)
            if opening.start_time and opening.end_time:
                inside = (
                    _to_minutes(opening.start_time) <= _to_minutes(query.start_time)
                    and _to_minutes(query.end_time) <= _to_minutes(opening.end_time)
                )
                if not inside:
                    return AvailabilityResult.unavailable(REASON_OUTSIDE_HOURS, ErrorCode.OUTSIDE_AVAILABILITY)

        # 3. Chevauchement / Overlap
        if find_conflict(query.start_time, query.end_time, bookings) is not None:
            return AvailabilityResult.unavailable(REASON_BOOKED, ErrorCode.SLOT_CONFLICT)

        # 4. Temps de trajet / Travel time
        if query.include_travel_time:
            return self._check_travel(query, bookings, provider)

        return AvailabilityResult(available=True)

    def _check_travel(
        self, query: AvailabilityQuery, bookings: Sequence[Booking], provider: Provider | None
    ) -> AvailabilityResult:
        base = Location.from_coordinates(provider.latitude, provider.longitude) if provider else None
        candidate = query.location or base
        start = _to_minutes(query.start_time)
        end = _to_minutes(query.end_time)

        active = sorted(
            (b for b in bookings if b.status in ACTIVE_BOOKING_STATUSES),
            key=lambda b: _to_minutes(b.start_time),
        )
        previous = None
        following = None
        for booking in active:
            if _to_minutes(booking.end_time) <= start:
                previous = booking
            elif following is None and _to_minutes(booking.start_time) >= end:
                following = booking

        if previous is not None:
            required = self._required_gap(self._booking_location(previous, base), candidate)
            gap = start - _to_minutes(previous.end_time)
            if gap < required:
                return AvailabilityResult.unavailable(
                    REASON_TRAVEL, ErrorCode.INSUFFICIENT_TRAVEL_TIME,
                    required_gap_minutes=required, actual_gap_minutes=gap,
                )

        if following is not None:
            required = self._required_gap(candidate, self._booking_location(following, base))
            gap = _to_minutes(following.start_time) - end
            if gap < required:
                return AvailabilityResult.unavailable(
                    REASON_TRAVEL, ErrorCode.INSUFFICIENT_TRAVEL_TIME,
                    required_gap_minutes=required, actual_gap_minutes=gap,
                )

        return AvailabilityResult(available=True)

    @staticmethod
    def _booking_location(booking: Booking, base: Location | None) -> Location | None:
        # Sans coordonnées client, le rendez-vous a lieu chez le prestataire
        # Without customer coordinates the appointment happens at the provider's base
        return Location.from_coordinates(booking.latitude, booking.longitude) or base

    def _required_gap(self, origin: Location | None, destination: Location | None) -> int:
        """Battement requis ; 0 si une position manque / Required gap; 0 when a location is unknown."""
        if origin is None or destination is None:
            return 0
        distance_km = self.distance_fn(origin.latitude, origin.longitude, destination.latitude, destination.longitude)
        return TimeCalculatorService.required_buffer_minutes(distance_km, self.average_speed_kmh, self.margin_factor)
