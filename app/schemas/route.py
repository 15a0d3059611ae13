"""Schémas Demandes de passage et Tournées / Route order and route schemas."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.route import RouteStatus
from app.models.route_order import RouteOrderPriority, RouteOrderStatus
from app.models.route_stop import RouteStopStatus
from app.schemas.common import DateStr, TimeStr


# --- RouteOrder ---
class RouteOrderCreate(BaseModel):
    service_type: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=255)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    number_of_horses: int = Field(1, ge=1, le=50)
    date_from: DateStr
    date_to: DateStr
    priority: RouteOrderPriority = RouteOrderPriority.NORMAL
    special_instructions: str | None = Field(None, max_length=1000)
    contact_phone: str | None = Field(None, max_length=30)

    @model_validator(mode="after")
    def check_date_range(self):
        if self.date_to < self.date_from:
            raise ValueError("date_to doit suivre date_from / date_to must not precede date_from")
        return self


class RouteOrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    customer_id: int
    service_type: str
    address: str
    latitude: float | None
    longitude: float | None
    number_of_horses: int
    date_from: str
    date_to: str
    priority: RouteOrderPriority
    status: RouteOrderStatus
    special_instructions: str | None
    contact_phone: str | None
    created_at: str


# --- Route ---
class RouteCreate(BaseModel):
    route_name: str | None = Field(None, max_length=150)
    route_date: DateStr
    start_time: TimeStr
    # Ordre de visite choisi par le prestataire / Visiting order chosen by the provider
    order_ids: list[int] = Field(..., min_length=1)


class RouteStopRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    route_order_id: int
    stop_order: int
    address: str | None
    latitude: float | None
    longitude: float | None
    estimated_arrival: str
    estimated_departure: str
    estimated_duration_min: int
    distance_from_previous_km: float | None
    travel_minutes_from_previous: int | None
    status: RouteStopStatus


class RouteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    provider_id: int
    route_name: str
    route_date: str
    start_time: str
    status: RouteStatus
    total_distance_km: float
    total_duration_minutes: int
    created_at: str
    stops: list[RouteStopRead] = []
