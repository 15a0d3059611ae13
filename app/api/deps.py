"""
Dépendances d'authentification et du moteur / Authentication and engine dependencies.
Injectées dans les routes via Depends().
"""

from typing import NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import get_db, get_session_factory
from app.models.provider import Provider
from app.models.user import User, UserType
from app.repositories.scheduling_store import SqlSchedulingStore
from app.services.engine import SchedulingEngine
from app.services.feature_flags import FeatureFlagService
from app.services.results import ServiceError
from app.utils.auth import decode_access_token

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extraire et valider l'utilisateur depuis le JWT / Extract and validate user from JWT."""
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


async def get_current_provider(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Provider:
    """Profil prestataire de l'utilisateur courant / Current user's provider profile."""
    result = await db.execute(select(Provider).where(Provider.user_id == user.id))
    provider = result.scalar_one_or_none()
    if provider is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Provider account required")
    return provider


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.user_type != UserType.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin account required")
    return user


def get_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> SqlSchedulingStore:
    return SqlSchedulingStore(session_factory)


def get_feature_flags(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> FeatureFlagService:
    return FeatureFlagService(session_factory)


def get_engine(
    store: SqlSchedulingStore = Depends(get_store),
    flags: FeatureFlagService = Depends(get_feature_flags),
) -> SchedulingEngine:
    return SchedulingEngine(store, flags.is_enabled)


def raise_for_error(error: ServiceError) -> NoReturn:
    """Traduire une erreur métier en réponse HTTP / Map a business error to an HTTP response."""
    raise HTTPException(
        status_code=error.http_status,
        detail={"error": error.code.value, "message": error.message, **error.details},
    )


async def resolve_booking_parties(
    user: User, provider_id: int, customer_id: int | None, engine: SchedulingEngine
) -> tuple[int, int | None]:
    """
    (client, prestataire créateur) d'une réservation / (customer, creating provider) of a booking.

    Avec customer_id, le prestataire concerné réserve pour un client (réservation
    manuelle). Un client ne réserve que pour lui.
    With customer_id, the booked provider books on behalf of a customer (manual
    booking). A customer only books for themself.
    """
    if customer_id is None:
        return user.id, None
    provider = await engine.store.get_provider(provider_id)
    if provider is not None and provider.user_id == user.id:
        return customer_id, provider.id
    if customer_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot book on behalf of another user")
    return user.id, None
