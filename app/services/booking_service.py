"""
Service de réservation / Booking service.

Chemin unique de création d'une réservation : validations métier, contrôle
de disponibilité en lecture, puis écriture par la garde anti-conflit.
Single booking path: business validation, read-time availability check,
then the write through BookingConflictGuard.
"""

import logging
from dataclasses import dataclass

from app.config import settings
from app.models.booking import Booking, BookingStatus
from app.services.availability_checker import (
    AvailabilityChecker,
    AvailabilityQuery,
    AvailabilityResult,
    Location,
)
from app.services.booking_guard import BookingConflictGuard
from app.services.ports import SchedulingStore
from app.services.results import ErrorCode, Result
from app.services.time_calculator import TimeCalculatorService

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

# Transitions autorisées / Allowed status transitions
ALLOWED_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


@dataclass
class BookingRequest:
    """Demande de réservation unique / Single booking request."""
    customer_id: int
    provider_id: int
    service_id: int
    booking_date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str | None = None  # défaut : début + durée / default: start + service duration
    horse_id: int | None = None
    route_order_id: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    customer_notes: str | None = None
    include_travel_time: bool = True
    # Réservation manuelle saisie par le prestataire / Manual booking entered by the provider
    created_by_provider_id: int | None = None


class BookingService:
    """Création et cycle de vie des réservations / Booking creation and lifecycle."""

    def __init__(
        self,
        store: SchedulingStore,
        checker: AvailabilityChecker | None = None,
        guard: BookingConflictGuard | None = None,
        min_booking_minutes: int = settings.MIN_BOOKING_MINUTES,
        max_booking_minutes: int = settings.MAX_BOOKING_MINUTES,
    ):
        self.store = store
        self.checker = checker or AvailabilityChecker(store)
        self.guard = guard or BookingConflictGuard(store)
        self.min_booking_minutes = min_booking_minutes
        self.max_booking_minutes = max_booking_minutes

    def validate_slot(self, start_time: str, end_time: str) -> str | None:
        """Message d'erreur si le créneau est invalide, sinon None / Error message or None."""
        start = TimeCalculatorService.time_to_minutes(start_time)
        end = TimeCalculatorService.time_to_minutes(end_time)
        if end <= start:
            return "L'heure de fin doit suivre l'heure de début / End time must be after start time"
        if end > MINUTES_PER_DAY:
            return "Le créneau doit tenir dans la journée / The slot must end on the same day"
        duration = end - start
        if duration < self.min_booking_minutes:
            return f"Durée minimale {self.min_booking_minutes} min / Minimum duration is {self.min_booking_minutes} minutes"
        if duration > self.max_booking_minutes:
            return f"Durée maximale {self.max_booking_minutes} min / Maximum duration is {self.max_booking_minutes} minutes"
        return None

    async def check_availability(self, query: AvailabilityQuery) -> Result[AvailabilityResult]:
        error = self.validate_slot(query.start_time, query.end_time)
        if error:
            return Result.failure(ErrorCode.INVALID_TIMES, error)
        return Result.success(await self.checker.check(query))

    async def create_booking(self, request: BookingRequest) -> Result[Booking]:
        """
        Créer une réservation / Create a booking.

        Retourne une erreur typée pour tout refus attendu ; SLOT_CONFLICT peut
        venir du contrôle en lecture ou de la garde à l'écriture.
        """
        service = await self.store.get_service(request.service_id)
        if service is None or not service.is_active:
            return Result.failure(ErrorCode.INACTIVE_SERVICE, "Prestation indisponible / Service not available")
        if service.provider_id != request.provider_id:
            return Result.failure(
                ErrorCode.SERVICE_PROVIDER_MISMATCH,
                "La prestation n'appartient pas à ce prestataire / Service does not belong to this provider",
            )

        provider = await self.store.get_provider(request.provider_id)
        if provider is None or not provider.is_active:
            return Result.failure(ErrorCode.INACTIVE_PROVIDER, "Prestataire inactif / Provider is not active")
        if request.created_by_provider_id is not None:
            if request.created_by_provider_id != provider.id:
                return Result.failure(ErrorCode.NOT_OWNER, "Accès refusé / Only the provider can create a manual booking")
        elif provider.user_id == request.customer_id:
            return Result.failure(ErrorCode.SELF_BOOKING, "Un prestataire ne peut pas se réserver / Providers cannot book themselves")

        # Durée copiée à la réservation / Duration copied at booking time
        end_time = request.end_time or TimeCalculatorService.add_minutes_to_time(
            request.start_time, service.duration_minutes
        )
        error = self.validate_slot(request.start_time, end_time)
        if error:
            return Result.failure(ErrorCode.INVALID_TIMES, error)

        availability = await self.checker.check(
            AvailabilityQuery(
                provider_id=request.provider_id,
                booking_date=request.booking_date,
                start_time=request.start_time,
                end_time=end_time,
                location=Location.from_coordinates(request.latitude, request.longitude),
                include_travel_time=request.include_travel_time,
            )
        )
        if not availability.available:
            details = {}
            if availability.required_gap_minutes is not None:
                details = {
                    "required_gap_minutes": availability.required_gap_minutes,
                    "actual_gap_minutes": availability.actual_gap_minutes,
                }
            return Result.failure(availability.code, availability.reason, **details)

        now = TimeCalculatorService.now_iso()
        return await self.guard.book({
            "provider_id": request.provider_id,
            "customer_id": request.customer_id,
            "service_id": request.service_id,
            "booking_date": request.booking_date,
            "start_time": request.start_time,
            "end_time": end_time,
            "status": BookingStatus.PENDING,
            "horse_id": request.horse_id,
            "route_order_id": request.route_order_id,
            "latitude": request.latitude,
            "longitude": request.longitude,
            "customer_notes": request.customer_notes,
            "series_id": None,
            "created_by_provider_id": request.created_by_provider_id,
            "cancellation_message": None,
            "created_at": now,
            "updated_at": now,
        })

    async def is_party(self, actor_user_id: int, customer_id: int, provider_id: int) -> bool:
        """Le client ou le prestataire concerné / The customer or the provider involved."""
        if actor_user_id == customer_id:
            return True
        provider = await self.store.get_provider(provider_id)
        return provider is not None and provider.user_id == actor_user_id

    async def update_status(
        self,
        booking_id: int,
        new_status: BookingStatus,
        actor_user_id: int,
        cancellation_message: str | None = None,
    ) -> Result[Booking]:
        booking = await self.store.get_booking(booking_id)
        if booking is None:
            return Result.failure(ErrorCode.BOOKING_NOT_FOUND, f"Réservation {booking_id} introuvable / not found")
        if not await self.is_party(actor_user_id, booking.customer_id, booking.provider_id):
            return Result.failure(ErrorCode.NOT_OWNER, "Accès refusé / Not allowed to modify this booking")

        current = BookingStatus(booking.status)
        if new_status not in ALLOWED_TRANSITIONS[current]:
            return Result.failure(
                ErrorCode.INVALID_STATUS_TRANSITION,
                f"Transition {current.value} -> {new_status.value} interdite / not allowed",
                current_status=current.value,
            )

        changes = {"status": new_status, "updated_at": TimeCalculatorService.now_iso()}
        if new_status == BookingStatus.CANCELLED and cancellation_message:
            changes["cancellation_message"] = cancellation_message

        async def _write(tx: SchedulingStore) -> Booking:
            return await tx.update_booking(booking, **changes)

        updated = await self.store.run_in_transaction(_write)
        logger.info("Booking %s: %s -> %s by user %s", booking_id, current.value, new_status.value, actor_user_id)
        return Result.success(updated)
