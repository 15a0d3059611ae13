"""
Expansion des séries récurrentes / Recurring series expansion.

Une demande récurrente devient une suite de réservations datées. Chaque date
passe par le même chemin qu'une réservation unique ; un conflit sur une date
n'interrompt pas la série (succès partiel).
One recurring request becomes dated bookings through the single-booking path;
a conflict on one date never aborts the series (partial success).
"""

import logging
from dataclasses import dataclass, field

from app.config import settings
from app.models.booking import Booking, BookingStatus
from app.models.booking_series import BookingSeries, SeriesStatus
from app.services.booking_service import BookingRequest, BookingService
from app.services.interval_resolver import IntervalResolver
from app.services.ports import FeatureFlagCheck, SchedulingStore
from app.services.results import ErrorCode, Result
from app.services.time_calculator import TimeCalculatorService

logger = logging.getLogger(__name__)

RECURRING_FEATURE_FLAG = "recurring_bookings"


@dataclass
class SeriesRequest:
    customer_id: int
    provider_id: int
    service_id: int
    first_booking_date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    total_occurrences: int
    interval_weeks: int | None = None  # défaut : intervalle résolu / default: resolved interval
    horse_id: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    customer_notes: str | None = None
    created_by_provider_id: int | None = None  # série manuelle / manual series

@dataclass(frozen=True)
class SkippedDate:
    date: str
    reason: str  # code d'erreur / error code, e.g. "SLOT_CONFLICT"
    message: str = ""


@dataclass
class SeriesOutcome:
    """Succès partiel : créées et ignorées, dans l'ordre / Partial success: created and skipped, in order."""
    series: BookingSeries
    created_bookings: list[Booking] = field(default_factory=list)
    skipped_dates: list[SkippedDate] = field(default_factory=list)


def candidate_dates(first_date: str, interval_weeks: int, total_occurrences: int) -> list[str]:
    """Dates candidates first + k*interval*7 jours / Candidate dates, k = 0..n-1."""
    return [
        TimeCalculatorService.add_days(first_date, k * interval_weeks * 7)
        for k in range(total_occurrences)
    ]


class SeriesExpander:

    def __init__(
        self,
        store: SchedulingStore,
        booking_service: BookingService,
        is_feature_enabled: FeatureFlagCheck,
        interval_resolver: IntervalResolver | None = None,
        min_interval_weeks: int = settings.MIN_INTERVAL_WEEKS,
        max_interval_weeks: int = settings.MAX_INTERVAL_WEEKS,
        min_occurrences: int = settings.MIN_SERIES_OCCURRENCES,
        max_occurrences: int = settings.MAX_SERIES_OCCURRENCES,
    ):
        self.store = store
        self.booking_service = booking_service
        self.is_feature_enabled = is_feature_enabled
        self.interval_resolver = interval_resolver or IntervalResolver(store)
        self.min_interval_weeks = min_interval_weeks
        self.max_interval_weeks = max_interval_weeks
        self.min_occurrences = min_occurrences
        self.max_occurrences = max_occurrences

    async def create_series(self, request: SeriesRequest) -> Result[SeriesOutcome]:
        """
        Créer une série / Create a series.

        Préconditions vérifiées avant toute réservation (échec global) :
        feature flag, prestataire actif avec récurrence activée, intervalle,
        nombre d'occurrences. Ensuite chaque date est tentée dans l'ordre
        chronologique, chacune dans sa propre transaction.
        """
        # Le flag court-circuite avant toute logique métier / The flag short-circuits first
        if not await self.is_feature_enabled(RECURRING_FEATURE_FLAG):
            return Result.failure(
                ErrorCode.RECURRING_FEATURE_OFF,
                "Réservations récurrentes indisponibles / Recurring bookings are not available",
            )

        provider = await self.store.get_provider(request.provider_id)
        if provider is None or not provider.is_active or not provider.recurring_enabled:
            return Result.failure(
                ErrorCode.RECURRING_DISABLED,
                "Ce prestataire n'accepte pas les séries / This provider does not accept recurring bookings",
            )
        if request.created_by_provider_id is not None and request.created_by_provider_id != provider.id:
            return Result.failure(ErrorCode.NOT_OWNER, "Accès refusé / Only the provider can create a manual series")

        interval_weeks = request.interval_weeks
        if interval_weeks is None:
            service = await self.store.get_service(request.service_id)
            interval_weeks = await self.interval_resolver.resolve(
                request.horse_id,
                request.provider_id,
                request.service_id,
                service.recommended_interval_weeks if service else None,
            )
        if interval_weeks is None or not self.min_interval_weeks <= interval_weeks <= self.max_interval_weeks:
            return Result.failure(
                ErrorCode.INVALID_INTERVAL,
                f"Intervalle entre {self.min_interval_weeks} et {self.max_interval_weeks} semaines / "
                f"Interval must be {self.min_interval_weeks}-{self.max_interval_weeks} weeks",
                interval_weeks=interval_weeks,
            )

        max_occurrences = min(provider.max_series_occurrences, self.max_occurrences)
        if not self.min_occurrences <= request.total_occurrences <= max_occurrences:
            return Result.failure(
                ErrorCode.INVALID_OCCURRENCES,
                f"Occurrences entre {self.min_occurrences} et {max_occurrences} / "
                f"Occurrences must be {self.min_occurrences}-{max_occurrences}",
                max_occurrences=max_occurrences,
            )

        created: list[Booking] = []
        skipped: list[SkippedDate] = []
        # Séquentiel : chaque tentative voit les réservations des précédentes
        # Sequential: each attempt sees the bookings of the earlier ones
        for booking_date in candidate_dates(request.first_booking_date, interval_weeks, request.total_occurrences):
            result = await self.booking_service.create_booking(BookingRequest(
                customer_id=request.customer_id,
                provider_id=request.provider_id,
                service_id=request.service_id,
                booking_date=booking_date,
                start_time=request.start_time,
                horse_id=request.horse_id,
                latitude=request.latitude,
                longitude=request.longitude,
                customer_notes=request.customer_notes,
                created_by_provider_id=request.created_by_provider_id,
            ))
            if result.ok:
                created.append(result.value)
            else:
                skipped.append(SkippedDate(booking_date, result.error.code.value, result.error.message))
                logger.info("Series date %s skipped: %s", booking_date, result.error.code.value)

        if not created:
            return Result.failure(
                ErrorCode.NO_BOOKINGS_CREATED,
                "Aucune date disponible / None of the requested dates could be booked",
                skipped_dates=[{"date": s.date, "reason": s.reason} for s in skipped],
            )

        async def _persist(tx: SchedulingStore) -> BookingSeries:
            series = await tx.create_series({
                "customer_id": request.customer_id,
                "provider_id": request.provider_id,
                "service_id": request.service_id,
                "horse_id": request.horse_id,
                "created_by_provider_id": request.created_by_provider_id,
                "start_time": request.start_time,
                "interval_weeks": interval_weeks,
                "total_occurrences": request.total_occurrences,
                "created_count": len(created),
                "status": SeriesStatus.ACTIVE,
                "created_at": TimeCalculatorService.now_iso(),
                "cancelled_at": None,
            })
            await tx.link_bookings_to_series([b.id for b in created], series.id)
            return series

        series = await self.store.run_in_transaction(_persist)
        for booking in created:
            booking.series_id = series.id

        logger.info(
            "Series %s created for provider %s: %d booked, %d skipped",
            series.id, request.provider_id, len(created), len(skipped),
        )
        return Result.success(SeriesOutcome(series=series, created_bookings=created, skipped_dates=skipped))

    async def cancel_series(
        self,
        series_id: int,
        actor_user_id: int,
        today: str,
        cancellation_message: str | None = None,
    ) -> Result[int]:
        """
        Annuler une série / Cancel a series.
        Annule les réservations actives à partir d'aujourd'hui et retourne leur nombre.
        Cancels active bookings from today on and returns how many.
        """
        series = await self.store.get_series(series_id)
        if series is None:
            return Result.failure(ErrorCode.SERIES_NOT_FOUND, f"Série {series_id} introuvable / not found")
        if not await self.booking_service.is_party(actor_user_id, series.customer_id, series.provider_id):
            return Result.failure(ErrorCode.NOT_OWNER, "Accès refusé / Not allowed to cancel this series")

        async def _cancel(tx: SchedulingStore) -> int:
            now = TimeCalculatorService.now_iso()
            upcoming = await tx.find_series_bookings(series_id, today)
            for booking in upcoming:
                changes = {"status": BookingStatus.CANCELLED, "updated_at": now}
                if cancellation_message:
                    changes["cancellation_message"] = cancellation_message
                await tx.update_booking(booking, **changes)
            await tx.update_series(series, status=SeriesStatus.CANCELLED, cancelled_at=now)
            return len(upcoming)

        cancelled_count = await self.store.run_in_transaction(_cancel)
        logger.info("Series %s cancelled by user %s: %d booking(s) cancelled", series_id, actor_user_id, cancelled_count)
        return Result.success(cancelled_count)
