"""Routes Feature flags / Feature flag API routes (admin)."""

from fastapi import APIRouter, Depends

from app.api.deps import get_feature_flags, require_admin
from app.models.user import User
from app.schemas.interval import FeatureFlagUpdate
from app.services.feature_flags import FeatureFlagService

router = APIRouter()


@router.get("/")
async def list_feature_flags(
    user: User = Depends(require_admin),
    flags: FeatureFlagService = Depends(get_feature_flags),
) -> dict[str, bool]:
    return await flags.all_flags()


@router.put("/{name}")
async def set_feature_flag(
    name: str,
    data: FeatureFlagUpdate,
    user: User = Depends(require_admin),
    flags: FeatureFlagService = Depends(get_feature_flags),
) -> dict[str, bool]:
    """Activer ou désactiver un flag / Enable or disable a flag."""
    await flags.set_flag(name, data.enabled)
    return {name: data.enabled}
