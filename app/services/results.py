"""
Résultats typés des services / Typed service results.
Les issues métier attendues sont retournées, jamais levées.
Expected business outcomes are returned, never raised.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorCode(str, enum.Enum):
    """Codes d'erreur métier / Business error codes."""
    # Réservation / Booking
    SLOT_CONFLICT = "SLOT_CONFLICT"
    PROVIDER_CLOSED = "PROVIDER_CLOSED"
    OUTSIDE_AVAILABILITY = "OUTSIDE_AVAILABILITY"
    INSUFFICIENT_TRAVEL_TIME = "INSUFFICIENT_TRAVEL_TIME"
    INVALID_TIMES = "INVALID_TIMES"
    INACTIVE_SERVICE = "INACTIVE_SERVICE"
    INACTIVE_PROVIDER = "INACTIVE_PROVIDER"
    SERVICE_PROVIDER_MISMATCH = "SERVICE_PROVIDER_MISMATCH"
    SELF_BOOKING = "SELF_BOOKING"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    # Séries / Series
    RECURRING_FEATURE_OFF = "RECURRING_FEATURE_OFF"
    RECURRING_DISABLED = "RECURRING_DISABLED"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    INVALID_OCCURRENCES = "INVALID_OCCURRENCES"
    NO_BOOKINGS_CREATED = "NO_BOOKINGS_CREATED"
    SERIES_NOT_FOUND = "SERIES_NOT_FOUND"
    NOT_OWNER = "NOT_OWNER"
    # Tournées / Routes
    ORDERS_UNAVAILABLE = "ORDERS_UNAVAILABLE"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"


# Correspondance code -> statut HTTP / Code -> HTTP status mapping
HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SLOT_CONFLICT: 409,
    ErrorCode.PROVIDER_CLOSED: 409,
    ErrorCode.OUTSIDE_AVAILABILITY: 409,
    ErrorCode.INSUFFICIENT_TRAVEL_TIME: 409,
    ErrorCode.ORDERS_UNAVAILABLE: 409,
    ErrorCode.BOOKING_NOT_FOUND: 404,
    ErrorCode.SERIES_NOT_FOUND: 404,
    ErrorCode.PROVIDER_NOT_FOUND: 404,
    ErrorCode.NOT_OWNER: 403,
}


@dataclass(frozen=True)
class ServiceError:
    """Erreur métier typée / Typed business error."""
    code: ErrorCode
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE.get(self.code, 400)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Succès (value) ou échec (error) / Success (value) or failure (error)."""
    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, code: ErrorCode, message: str = "", **details: Any) -> Result[T]:
        return cls(error=ServiceError(code=code, message=message, details=details))
