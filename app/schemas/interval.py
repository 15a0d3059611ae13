"""Schémas Intervalles et rappels / Interval and reminder schemas."""

from pydantic import BaseModel, ConfigDict, Field


class IntervalResolveRead(BaseModel):
    horse_id: int | None
    provider_id: int
    service_id: int
    default_weeks: int | None
    effective_weeks: int | None


class HorseIntervalUpdate(BaseModel):
    provider_id: int
    service_id: int | None = None  # None = toutes les prestations du prestataire / every service
    revisit_interval_weeks: int = Field(..., ge=1, le=52)
    notes: str | None = Field(None, max_length=500)


class HorseIntervalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    horse_id: int
    provider_id: int
    service_id: int | None
    revisit_interval_weeks: int
    notes: str | None
    updated_at: str


class DueReminderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    booking_id: int
    customer_id: int
    provider_id: int
    service_id: int
    horse_id: int | None
    interval_weeks: int
    last_completed: str
    due_date: str


class FeatureFlagUpdate(BaseModel):
    enabled: bool
