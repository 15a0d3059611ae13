"""
Séquencement des tournées / Route sequencing.

L'ordre de visite est celui choisi par le prestataire : aucune optimisation.
The visiting order is the provider's selection order: no optimisation pass.

Durée d'arrêt = nombre de chevaux x 60 min, sans tenir compte de la durée
réelle des prestations. Heuristique conservée telle quelle, à remplacer par
la durée de la prestation liée.
Stop duration = horses x 60 min, regardless of the actual service duration;
kept as is, candidate for replacement by the linked service duration.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Sequence

from app.config import settings
from app.models.route import Route, RouteStatus
from app.models.route_order import RouteOrder, RouteOrderStatus
from app.models.route_stop import RouteStop, RouteStopStatus
from app.services.ports import DistanceFn, SchedulingStore
from app.services.results import ErrorCode, Result
from app.services.time_calculator import TimeCalculatorService
from app.utils.geo import haversine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedStop:
    route_order_id: int
    stop_order: int  # 1-based
    estimated_arrival: datetime
    estimated_departure: datetime
    estimated_duration_min: int
    # Tronçon depuis l'arrêt précédent, None si inconnu / Leg from the previous stop, None when unknown
    distance_from_previous_km: float | None = None
    travel_minutes_from_previous: float | None = None


@dataclass
class RoutePlan:
    stops: list[PlannedStop] = field(default_factory=list)
    total_distance_km: float = 0.0
    total_duration_minutes: int = 0


@dataclass
class RouteCreation:
    route: Route
    stops: list[RouteStop]


def _has_coordinates(order: RouteOrder) -> bool:
    return order.latitude is not None and order.longitude is not None


def sequence_route(
    orders: Sequence[RouteOrder],
    route_date: str,
    start_time: str,
    minutes_per_horse: int = settings.ROUTE_MINUTES_PER_HORSE,
    average_speed_kmh: float = settings.ROUTE_AVERAGE_SPEED_KMH,
    distance_fn: DistanceFn = haversine,
) -> RoutePlan:
    """
    Calculer horaires et totaux en un seul passage / Compute times and totals in one pass.

    Un tronçon sans coordonnées à l'une de ses extrémités n'ajoute ni distance
    ni temps : les totaux sont alors sous-estimés.
    A leg missing coordinates at either end adds neither distance nor time,
    so totals understate the real route.
    """
    current = TimeCalculatorService.combine(route_date, start_time)
    total_distance = 0.0
    total_minutes = 0.0
    leg_distance = None
    leg_minutes = None
    stops = []

    for index, order in enumerate(orders):
        duration = order.number_of_horses * minutes_per_horse
        arrival = current
        current += timedelta(minutes=duration)
        total_minutes += duration
        stops.append(PlannedStop(
            route_order_id=order.id,
            stop_order=index + 1,
            estimated_arrival=arrival,
            estimated_departure=current,
            estimated_duration_min=duration,
            distance_from_previous_km=leg_distance,
            travel_minutes_from_previous=leg_minutes,
        ))

        leg_distance = None
        leg_minutes = None
        if index + 1 < len(orders):
            following = orders[index + 1]
            if _has_coordinates(order) and _has_coordinates(following):
                leg_distance = distance_fn(order.latitude, order.longitude, following.latitude, following.longitude)
                leg_minutes = TimeCalculatorService.travel_minutes(leg_distance, average_speed_kmh)
                current += timedelta(minutes=leg_minutes)
                total_distance += leg_distance
                total_minutes += leg_minutes

    return RoutePlan(
        stops=stops,
        total_distance_km=round(total_distance, 1),
        total_duration_minutes=round(total_minutes),
    )


class RouteService:
    """Création atomique d'une tournée / Atomic route creation."""

    def __init__(
        self,
        store: SchedulingStore,
        minutes_per_horse: int = settings.ROUTE_MINUTES_PER_HORSE,
        average_speed_kmh: float = settings.ROUTE_AVERAGE_SPEED_KMH,
        distance_fn: DistanceFn = haversine,
    ):
        self.store = store
        self.minutes_per_horse = minutes_per_horse
        self.average_speed_kmh = average_speed_kmh
        self.distance_fn = distance_fn

    async def create_route(
        self,
        provider_id: int,
        order_ids: Sequence[int],
        route_date: str,
        start_time: str,
        route_name: str | None = None,
    ) -> Result[RouteCreation]:
        """
        Créer la tournée, ses arrêts et passer les demandes en in_route /
        Create the route and its stops, and move the orders to in_route.

        Tout ou rien : si une demande n'est plus en attente, rien n'est écrit.
        All or nothing: if any order is no longer pending, nothing is written.
        """
        if not order_ids or len(set(order_ids)) != len(order_ids):
            return Result.failure(
                ErrorCode.ORDERS_UNAVAILABLE,
                "Liste de demandes vide ou en double / Empty or duplicated order list",
                unavailable_order_ids=sorted({oid for oid in order_ids if list(order_ids).count(oid) > 1}),
            )

        provider = await self.store.get_provider(provider_id)
        if provider is None:
            return Result.failure(ErrorCode.PROVIDER_NOT_FOUND, f"Prestataire {provider_id} introuvable / not found")

        async def _create(tx: SchedulingStore) -> Result[RouteCreation]:
            found = {order.id: order for order in await tx.get_route_orders(order_ids)}
            unavailable = [
                oid for oid in order_ids
                if oid not in found or found[oid].status != RouteOrderStatus.PENDING
            ]
            if unavailable:
                return Result.failure(
                    ErrorCode.ORDERS_UNAVAILABLE,
                    "Demandes plus disponibles / Some orders are no longer available",
                    unavailable_order_ids=unavailable,
                )

            orders = [found[oid] for oid in order_ids]
            plan = sequence_route(
                orders, route_date, start_time,
                minutes_per_horse=self.minutes_per_horse,
                average_speed_kmh=self.average_speed_kmh,
                distance_fn=self.distance_fn,
            )
            route = await tx.create_route({
                "provider_id": provider_id,
                "route_name": route_name or f"Tournée / Route {route_date}",
                "route_date": route_date,
                "start_time": start_time,
                "status": RouteStatus.PLANNED,
                "total_distance_km": plan.total_distance_km,
                "total_duration_minutes": plan.total_duration_minutes,
                "created_at": TimeCalculatorService.now_iso(),
            })

            stops = []
            for planned, order in zip(plan.stops, orders):
                stops.append(await tx.create_route_stop({
                    "route_id": route.id,
                    "route_order_id": order.id,
                    "stop_order": planned.stop_order,
                    "address": order.address,
                    "latitude": order.latitude,
                    "longitude": order.longitude,
                    "estimated_arrival": TimeCalculatorService.format_local(planned.estimated_arrival),
                    "estimated_departure": TimeCalculatorService.format_local(planned.estimated_departure),
                    "estimated_duration_min": planned.estimated_duration_min,
                    "distance_from_previous_km": (
                        round(planned.distance_from_previous_km, 2)
                        if planned.distance_from_previous_km is not None else None
                    ),
                    "travel_minutes_from_previous": (
                        round(planned.travel_minutes_from_previous)
                        if planned.travel_minutes_from_previous is not None else None
                    ),
                    "status": RouteStopStatus.PENDING,
                    "problem_note": None,
                }))
                await tx.update_route_order(order, status=RouteOrderStatus.IN_ROUTE)

            return Result.success(RouteCreation(route=route, stops=stops))

        result = await self.store.run_in_transaction(_create)

        if result.ok:
            logger.info(
                "Route %s created for provider %s: %d stops, %.1f km, %d min",
                result.value.route.id, provider_id, len(result.value.stops),
                result.value.route.total_distance_km, result.value.route.total_duration_minutes,
            )
        else:
            logger.warning("Route creation rejected for provider %s: %s", provider_id, result.error.details)
        return result
