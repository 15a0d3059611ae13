"""Routes Séries récurrentes / Recurring series API routes."""

from datetime import date

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_engine, raise_for_error, resolve_booking_parties
from app.models.user import User
from app.schemas.booking import BookingRead
from app.schemas.series import (
    SeriesCancel,
    SeriesCancelResult,
    SeriesCreate,
    SeriesCreateResult,
    SeriesRead,
    SkippedDateRead,
)
from app.services.engine import SchedulingEngine
from app.services.series_expander import SeriesRequest

router = APIRouter()


@router.post("/", response_model=SeriesCreateResult, status_code=201)
async def create_series(
    data: SeriesCreate,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    """
    Créer une série récurrente / Create a recurring series.
    Succès partiel : les dates en conflit sont listées dans skipped_dates.
    Partial success: conflicting dates are listed in skipped_dates.
    """
    customer_id, created_by = await resolve_booking_parties(user, data.provider_id, data.customer_id, engine)
    result = await engine.create_series(SeriesRequest(
        customer_id=customer_id,
        created_by_provider_id=created_by,
        **data.model_dump(exclude={"customer_id"}),
    ))
    if not result.ok:
        raise_for_error(result.error)

    outcome = result.value
    return SeriesCreateResult(
        series=SeriesRead.model_validate(outcome.series),
        created_bookings=[BookingRead.model_validate(b) for b in outcome.created_bookings],
        skipped_dates=[SkippedDateRead(date=s.date, reason=s.reason, message=s.message) for s in outcome.skipped_dates],
    )


@router.post("/{series_id}/cancel", response_model=SeriesCancelResult)
async def cancel_series(
    series_id: int,
    data: SeriesCancel | None = None,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    """Annuler les occurrences à venir / Cancel upcoming occurrences."""
    result = await engine.series.cancel_series(
        series_id,
        actor_user_id=user.id,
        today=date.today().isoformat(),
        cancellation_message=data.cancellation_message if data else None,
    )
    if not result.ok:
        raise_for_error(result.error)
    return SeriesCancelResult(cancelled_count=result.value)
