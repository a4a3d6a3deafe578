from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from quake_clusters.config.settings import get_settings

_engine: AsyncEngine | None = None


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the catalog database.

    Server databases get ``pool_pre_ping`` because the worker holds its pool
    idle for a whole run interval between runs.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return create_async_engine(database_url, echo=echo)
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True, pool_size=5)


def get_engine(echo: bool = False) -> AsyncEngine:
    """Return the process-wide engine for ``Settings.database_url``."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings().database_url, echo=echo)
    return _engine


async def dispose_engine() -> None:
    """Close pooled connections; the next ``get_engine`` call starts fresh."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
