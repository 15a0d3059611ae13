"""Routes API / API routes."""

from fastapi import APIRouter

from app.api import (
    availability,
    bookings,
    booking_series,
    route_orders,
    routes,
    intervals,
    reminders,
    feature_flags,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(availability.router, prefix="/availability", tags=["availability"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(booking_series.router, prefix="/booking-series", tags=["booking-series"])
api_router.include_router(route_orders.router, prefix="/route-orders", tags=["route-orders"])
api_router.include_router(routes.router, prefix="/routes", tags=["routes"])
api_router.include_router(intervals.router, tags=["intervals"])
api_router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])
api_router.include_router(feature_flags.router, prefix="/feature-flags", tags=["feature-flags"])
