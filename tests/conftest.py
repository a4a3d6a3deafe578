"""Shared test fixtures."""

from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from quake_clusters.models.base import Base

# Small USGS-shaped feed: a Ridgecrest sequence, a lone Alaska event,
# and a few malformed records
SAMPLE_FEED = Path(__file__).resolve().parent / "data" / "usgs_sample.geojson"


@pytest.fixture
def sample_feed_file() -> Path:
    """Return path to the sample GeoJSON feed."""
    return SAMPLE_FEED


@pytest.fixture
def sample_feed_json() -> dict:
    """Return a minimal valid feature collection for unit tests."""
    return {
        "type": "FeatureCollection",
        "metadata": {"generated": 1700000000000, "count": 2},
        "features": [
            {
                "type": "Feature",
                "id": "ci40000001",
                "properties": {"mag": 4.6, "place": "12 km SW of Searles Valley, CA", "time": 1700000000000},
                "geometry": {"type": "Point", "coordinates": [-117.5, 35.7, 8.2]},
            },
            {
                "type": "Feature",
                "id": "ci40000002",
                "properties": {"mag": 2.1, "place": "9 km W of Ridgecrest, CA", "time": 1700000600000},
                "geometry": {"type": "Point", "coordinates": [-117.7, 35.6, 4.0]},
            },
        ],
    }


@pytest.fixture
async def test_engine():
    """Create an async SQLite in-memory engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)
