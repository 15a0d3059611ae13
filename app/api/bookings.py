"""Routes Réservations / Booking API routes."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_current_user, get_engine, raise_for_error, resolve_booking_parties
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingRead, BookingStatusUpdate
from app.services.booking_service import BookingRequest
from app.services.engine import SchedulingEngine

router = APIRouter()


@router.post("/", response_model=BookingRead, status_code=201)
async def create_booking(
    data: BookingCreate,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    """Réserver un créneau / Book a slot. 409 si le créneau est pris / 409 when taken."""
    customer_id, created_by = await resolve_booking_parties(user, data.provider_id, data.customer_id, engine)
    result = await engine.create_booking(BookingRequest(
        customer_id=customer_id,
        created_by_provider_id=created_by,
        **data.model_dump(exclude={"customer_id"}),
    ))
    if not result.ok:
        raise_for_error(result.error)
    return result.value


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    booking = await engine.store.get_booking(booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    if not await engine.bookings.is_party(user.id, booking.customer_id, booking.provider_id):
        raise HTTPException(status_code=403, detail="Not allowed to view this booking")
    return booking


@router.patch("/{booking_id}/status", response_model=BookingRead)
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    """Confirmer, terminer ou annuler / Confirm, complete or cancel."""
    result = await engine.bookings.update_status(
        booking_id, data.status, actor_user_id=user.id, cancellation_message=data.cancellation_message
    )
    if not result.ok:
        raise_for_error(result.error)
    return result.value
