"""Routes Disponibilité / Availability API routes."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_current_user, get_engine, raise_for_error
from app.models.user import User
from app.schemas.booking import AvailabilityCheckRead, AvailabilityCheckRequest
from app.services.availability_checker import AvailabilityQuery, Location
from app.services.engine import SchedulingEngine
from app.services.time_calculator import TimeCalculatorService

router = APIRouter()


@router.post("/check", response_model=AvailabilityCheckRead)
async def check_availability(
    data: AvailabilityCheckRequest,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    """Contrôle indicatif d'un créneau / Advisory slot check (no write)."""
    end_time = data.end_time
    if end_time is None:
        if data.service_id is None:
            raise HTTPException(status_code=422, detail="end_time or service_id is required")
        service = await engine.store.get_service(data.service_id)
        if service is None:
            raise HTTPException(status_code=404, detail="Service not found")
        end_time = TimeCalculatorService.add_minutes_to_time(data.start_time, service.duration_minutes)

    result = await engine.check_availability(AvailabilityQuery(
        provider_id=data.provider_id,
        booking_date=data.booking_date,
        start_time=data.start_time,
        end_time=end_time,
        location=Location.from_coordinates(data.latitude, data.longitude),
        include_travel_time=data.include_travel_time,
    ))
    if not result.ok:
        raise_for_error(result.error)

    availability = result.value
    return AvailabilityCheckRead(
        available=availability.available,
        reason=availability.reason,
        code=availability.code.value if availability.code else None,
        required_gap_minutes=availability.required_gap_minutes,
        actual_gap_minutes=availability.actual_gap_minutes,
    )
