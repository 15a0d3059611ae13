"""Routes Intervalles de rappel / Recall interval API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_engine
from app.database import get_db
from app.models.horse import Horse, HorseServiceInterval
from app.models.provider import Provider, Service
from app.models.user import User
from app.schemas.interval import HorseIntervalRead, HorseIntervalUpdate, IntervalResolveRead
from app.services.engine import SchedulingEngine
from app.services.time_calculator import TimeCalculatorService

router = APIRouter()


@router.get("/intervals/resolve", response_model=IntervalResolveRead)
async def resolve_interval(
    provider_id: int,
    service_id: int,
    horse_id: int | None = None,
    user: User = Depends(get_current_user),
    engine: SchedulingEngine = Depends(get_engine),
):
    """Intervalle effectif (surcharge cheval, sinon recommandé) / Effective interval."""
    service = await engine.store.get_service(service_id)
    if service is None or service.provider_id != provider_id:
        raise HTTPException(status_code=404, detail="Service not found")

    effective = await engine.resolve_interval(horse_id, provider_id, service_id, service.recommended_interval_weeks)
    return IntervalResolveRead(
        horse_id=horse_id,
        provider_id=provider_id,
        service_id=service_id,
        default_weeks=service.recommended_interval_weeks,
        effective_weeks=effective,
    )


@router.put("/horses/{horse_id}/interval", response_model=HorseIntervalRead)
async def set_horse_interval(
    horse_id: int,
    data: HorseIntervalUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Créer ou remplacer la surcharge d'un cheval / Create or replace a horse override."""
    horse = await db.get(Horse, horse_id)
    if horse is None or horse.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Horse not found")
    if await db.get(Provider, data.provider_id) is None:
        raise HTTPException(status_code=404, detail="Provider not found")
    if data.service_id is not None:
        service = await db.get(Service, data.service_id)
        if service is None or service.provider_id != data.provider_id:
            raise HTTPException(status_code=404, detail="Service not found")

    query = select(HorseServiceInterval).where(
        HorseServiceInterval.horse_id == horse_id,
        HorseServiceInterval.provider_id == data.provider_id,
    )
    if data.service_id is None:
        query = query.where(HorseServiceInterval.service_id.is_(None))
    else:
        query = query.where(HorseServiceInterval.service_id == data.service_id)
    result = await db.execute(query)
    interval = result.scalar_one_or_none()

    if interval is None:
        interval = HorseServiceInterval(horse_id=horse_id, provider_id=data.provider_id, service_id=data.service_id)
        db.add(interval)
    interval.revisit_interval_weeks = data.revisit_interval_weeks
    interval.notes = data.notes
    interval.updated_at = TimeCalculatorService.now_iso()
    await db.flush()
    await db.refresh(interval)
    return interval
