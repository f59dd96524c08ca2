"""Read-only access to operational parameters stored in the conf table."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.config import settings
from threadboard.models.conf import Conf


class ConfigStore:
    """Key/value lookup with the application settings as fallback."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str) -> str | None:
        result = await self.db.execute(select(Conf.value).where(Conf.key == key))
        value = result.scalar_one_or_none()
        if value is None:
            fallback = getattr(settings, key, None)
            return None if fallback is None else str(fallback)
        return value

    async def get_int(self, key: str, default: int) -> int:
        value = await self.get(key)
        try:
            parsed = int(value) if value is not None else default
        except ValueError:
            return default
        return parsed if parsed > 0 else default
