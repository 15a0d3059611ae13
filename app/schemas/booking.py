"""Schémas Réservation / Booking schemas (availability check, booking, status update)."""

from pydantic import BaseModel, ConfigDict, Field

from app.models.booking import BookingStatus
from app.schemas.common import DateStr, TimeStr


# --- Disponibilité / Availability ---
class AvailabilityCheckRequest(BaseModel):
    provider_id: int
    booking_date: DateStr
    start_time: TimeStr
    end_time: TimeStr | None = None
    service_id: int | None = None  # pour déduire end_time / to derive end_time
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    include_travel_time: bool = True


class AvailabilityCheckRead(BaseModel):
    available: bool
    reason: str | None = None
    code: str | None = None
    required_gap_minutes: int | None = None
    actual_gap_minutes: int | None = None


# --- Réservation / Booking ---
class BookingCreate(BaseModel):
    provider_id: int
    customer_id: int | None = None  # réservation manuelle / manual booking
    service_id: int
    booking_date: DateStr
    start_time: TimeStr
    end_time: TimeStr | None = None
    horse_id: int | None = None
    route_order_id: int | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    customer_notes: str | None = Field(None, max_length=1000)
    include_travel_time: bool = True


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    cancellation_message: str | None = Field(None, max_length=1000)


class BookingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    provider_id: int
    customer_id: int
    service_id: int
    booking_date: str
    start_time: str
    end_time: str
    status: BookingStatus
    horse_id: int | None
    route_order_id: int | None
    series_id: int | None
    created_by_provider_id: int | None = None
    latitude: float | None
    longitude: float | None
    customer_notes: str | None
    cancellation_message: str | None
    created_at: str
    updated_at: str
