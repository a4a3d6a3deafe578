from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quake_clusters.db import engine as db_engine

_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory used by catalog writes.

    ``expire_on_commit=False`` keeps returned rows readable after each
    per-cluster transaction commits.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(db_engine.get_engine(), expire_on_commit=False)
    return _session_factory


async def close_sessions() -> None:
    """Drop the cached factory and dispose of its engine."""
    global _session_factory
    _session_factory = None
    await db_engine.dispose_engine()
