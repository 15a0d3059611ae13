"""Routes Demandes de passage / Route order API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_provider, get_current_user
from app.database import get_db
from app.models.provider import Provider
from app.models.route_order import RouteOrder, RouteOrderPriority, RouteOrderStatus
from app.models.user import User
from app.schemas.common import DateStr
from app.schemas.route import RouteOrderCreate, RouteOrderRead
from app.services.time_calculator import TimeCalculatorService
from app.utils.geo import bounding_box, haversine

router = APIRouter()


@router.post("/", response_model=RouteOrderRead, status_code=201)
async def create_route_order(
    data: RouteOrderCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Demande de passage sans heure fixe / Flexible request without fixed time."""
    order = RouteOrder(
        customer_id=user.id,
        status=RouteOrderStatus.PENDING,
        created_at=TimeCalculatorService.now_iso(),
        **data.model_dump(),
    )
    db.add(order)
    await db.flush()
    await db.refresh(order)
    return order


@router.get("/available", response_model=list[RouteOrderRead])
async def list_available_orders(
    on_date: DateStr | None = Query(None, alias="date"),
    radius_km: float | None = Query(None, gt=0, le=500),
    provider: Provider = Depends(get_current_provider),
    db: AsyncSession = Depends(get_db),
):
    """
    Demandes en attente, urgentes d'abord / Pending orders, urgent first.
    radius_km filtre autour de la base du prestataire / filters around the provider's base.
    """
    query = select(RouteOrder).where(RouteOrder.status == RouteOrderStatus.PENDING)
    if on_date is not None:
        query = query.where(RouteOrder.date_from <= on_date, RouteOrder.date_to >= on_date)

    use_radius = radius_km is not None and provider.latitude is not None and provider.longitude is not None
    if use_radius:
        # Pré-filtre rectangulaire en SQL, puis distance exacte / SQL bounding box, then exact distance
        min_lat, max_lat, min_lon, max_lon = bounding_box(provider.latitude, provider.longitude, radius_km)
        query = query.where(
            RouteOrder.latitude.between(min_lat, max_lat),
            RouteOrder.longitude.between(min_lon, max_lon),
        )

    result = await db.execute(query.order_by(RouteOrder.created_at, RouteOrder.id))
    orders = list(result.scalars().all())
    if use_radius:
        orders = [
            o for o in orders
            if haversine(provider.latitude, provider.longitude, o.latitude, o.longitude) <= radius_km
        ]
    return sorted(orders, key=lambda o: o.priority != RouteOrderPriority.URGENT)
