"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que la metadata les détecte.
Import all models here so the metadata can detect them.
"""

from app.models.user import User, UserType
from app.models.provider import Provider, Service
from app.models.availability import AvailabilityException, AvailabilitySchedule
from app.models.horse import Horse, HorseServiceInterval
from app.models.route_order import RouteOrder, RouteOrderPriority, RouteOrderStatus
from app.models.booking_series import BookingSeries, SeriesStatus
from app.models.booking import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus
from app.models.route import Route, RouteStatus
from app.models.route_stop import RouteStop, RouteStopStatus
from app.models.parameter import Parameter

__all__ = [
    "User",
    "UserType",
    "Provider",
    "Service",
    "AvailabilityException",
    "AvailabilitySchedule",
    "Horse",
    "HorseServiceInterval",
    "RouteOrder",
    "RouteOrderPriority",
    "RouteOrderStatus",
    "BookingSeries",
    "SeriesStatus",
    "ACTIVE_BOOKING_STATUSES",
    "Booking",
    "BookingStatus",
    "Route",
    "RouteStatus",
    "RouteStop",
    "RouteStopStatus",
    "Parameter",
]
