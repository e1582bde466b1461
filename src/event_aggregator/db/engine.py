from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine as sa_create_async_engine

from event_aggregator.config.settings import get_settings
from event_aggregator.persistence.models import Base

_engine: AsyncEngine | None = None


def get_engine(echo: bool = False) -> AsyncEngine:
    """Return a cached async engine instance."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = sa_create_async_engine(settings.database_url, echo=echo)
    return _engine


async def create_tables(engine: AsyncEngine) -> None:
    """Create the ``events`` table if it does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
