"""Tests for engine and session factory caching."""

from sqlalchemy import text

from quake_clusters.db import engine as db_engine
from quake_clusters.db import session as db_session
from quake_clusters.db.engine import build_engine


async def test_build_engine_for_sqlite():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.connect() as conn:
        assert (await conn.execute(text("SELECT 1"))).scalar() == 1
    await engine.dispose()


async def test_close_sessions_resets_cache(monkeypatch):
    monkeypatch.setattr(db_engine, "_engine", build_engine("sqlite+aiosqlite:///:memory:"))
    monkeypatch.setattr(db_session, "_session_factory", None)

    factory = db_session.get_session_factory()
    assert db_session.get_session_factory() is factory

    await db_session.close_sessions()
    assert db_engine._engine is None
    assert db_session._session_factory is None
