"""
Feature flags / Feature flags.
Valeur par défaut dans la configuration, surchargée par la table parameters
(clé « feature_flag:<nom> »).
Default from settings, overridden by a parameters row keyed "feature_flag:<name>".
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.models.parameter import Parameter

FEATURE_FLAG_PREFIX = "feature_flag:"
TRUE_VALUES = {"1", "true", "yes", "on"}


def flag_key(name: str) -> str:
    return f"{FEATURE_FLAG_PREFIX}{name}"


class FeatureFlagService:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], defaults: dict[str, bool] | None = None):
        self.session_factory = session_factory
        self.defaults = defaults if defaults is not None else settings.FEATURE_FLAGS

    async def is_enabled(self, name: str) -> bool:
        """Lire un flag ; inconnu = désactivé / Read a flag; unknown flags are off."""
        async with self.session_factory() as session:
            result = await session.execute(select(Parameter).where(Parameter.key == flag_key(name)))
            param = result.scalar_one_or_none()
        if param is None:
            return self.defaults.get(name, False)
        return param.value.strip().lower() in TRUE_VALUES

    async def all_flags(self) -> dict[str, bool]:
        flags = dict(self.defaults)
        async with self.session_factory() as session:
            result = await session.execute(select(Parameter).where(Parameter.key.startswith(FEATURE_FLAG_PREFIX)))
            for param in result.scalars().all():
                flags[param.key[len(FEATURE_FLAG_PREFIX):]] = param.value.strip().lower() in TRUE_VALUES
        return flags

    async def set_flag(self, name: str, enabled: bool) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(select(Parameter).where(Parameter.key == flag_key(name)))
                param = result.scalar_one_or_none()
                if param is None:
                    session.add(Parameter(key=flag_key(name), value=str(enabled).lower(), value_type="bool"))
                else:
                    param.value = str(enabled).lower()
