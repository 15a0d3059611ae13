"""Routes Tournées / Route API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_current_provider, get_engine, get_feature_flags, raise_for_error
from app.database import get_db
from app.models.provider import Provider
from app.models.route import Route
from app.schemas.route import RouteCreate, RouteRead, RouteStopRead
from app.services.engine import SchedulingEngine
from app.services.feature_flags import FeatureFlagService

router = APIRouter()

ROUTE_PLANNING_FLAG = "route_planning"


@router.post("/", response_model=RouteRead, status_code=201)
async def create_route(
    data: RouteCreate,
    provider: Provider = Depends(get_current_provider),
    engine: SchedulingEngine = Depends(get_engine),
    flags: FeatureFlagService = Depends(get_feature_flags),
):
    """
    Créer une tournée dans l'ordre choisi / Create a route in the chosen order.
    Tout ou rien : 409 si une demande n'est plus en attente.
    All or nothing: 409 when an order is no longer pending.
    """
    if not await flags.is_enabled(ROUTE_PLANNING_FLAG):
        raise HTTPException(status_code=404, detail="Route planning is not available")

    result = await engine.create_route(
        provider.id, data.order_ids, data.route_date, data.start_time, route_name=data.route_name
    )
    if not result.ok:
        raise_for_error(result.error)

    route = result.value.route
    # Relation stops non chargée hors session / stops relationship is not loaded outside the session
    payload = {name: getattr(route, name) for name in RouteRead.model_fields if name != "stops"}
    return RouteRead(**payload, stops=[RouteStopRead.model_validate(s) for s in result.value.stops])


@router.get("/{route_id}", response_model=RouteRead)
async def get_route(
    route_id: int,
    provider: Provider = Depends(get_current_provider),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Route).where(Route.id == route_id).options(selectinload(Route.stops))
    )
    route = result.scalar_one_or_none()
    if route is None or route.provider_id != provider.id:
        raise HTTPException(status_code=404, detail="Route not found")
    return route
