"""Schémas Série récurrente / Recurring series schemas."""

from pydantic import BaseModel, ConfigDict, Field

from app.models.booking_series import SeriesStatus
from app.schemas.booking import BookingRead
from app.schemas.common import DateStr, TimeStr


class SeriesCreate(BaseModel):
    provider_id: int
    # Série manuelle : le prestataire réserve pour un client / Manual series: the provider books for a customer
    customer_id: int | None = None
    service_id: int
    first_booking_date: DateStr
    start_time: TimeStr
    # Bornes métier vérifiées par le service (codes INVALID_*) / Ranges checked by the service
    total_occurrences: int
    interval_weeks: int | None = None  # défaut : intervalle résolu / default: resolved interval
    horse_id: int | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    customer_notes: str | None = Field(None, max_length=1000)


class SeriesRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    customer_id: int
    provider_id: int
    service_id: int
    horse_id: int | None
    created_by_provider_id: int | None = None
    start_time: str
    interval_weeks: int
    total_occurrences: int
    created_count: int
    status: SeriesStatus
    created_at: str
    cancelled_at: str | None


class SkippedDateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    date: str
    reason: str
    message: str = ""


class SeriesCreateResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    series: SeriesRead
    created_bookings: list[BookingRead]
    skipped_dates: list[SkippedDateRead]


class SeriesCancel(BaseModel):
    cancellation_message: str | None = Field(None, max_length=1000)


class SeriesCancelResult(BaseModel):
    cancelled_count: int
