"""Cluster definition catalog access.

Provides the three catalog operations the synchronizer needs:

- ``find_by_stable_key``: point lookup returning ``(id, slug, version)``.
- ``insert_if_absent``: atomic insert keyed by ``stable_key``
  (``INSERT ... ON CONFLICT DO NOTHING``).
- ``update_if_version``: compare-and-swap update of the mutable fields,
  applied only while the row still has the expected version.

All functions take an active ``AsyncSession``; the caller owns the
transaction.
"""

from __future__ import annotations

from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from quake_clusters.clustering.summary import ClusterSummary
from quake_clusters.errors import PersistenceError
from quake_clusters.models.cluster_definition import ClusterDefinition

# Dialects with a native ``ON CONFLICT DO NOTHING`` insert construct
_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(frozen=True)
class CatalogEntry:
    """The identity columns of an existing cluster definition."""

    id: str
    slug: str
    version: int


def summary_to_values(summary: ClusterSummary) -> dict:
    """Map a summary onto the mutable ``ClusterDefinition`` columns.

    Does NOT include id, stable_key, slug, created_at or version.
    """
    return {
        "strongest_event_id": summary.strongest_event.id,
        "event_ids": list(summary.event_ids),
        "event_count": summary.event_count,
        "title": summary.title,
        "description": summary.description,
        "location_name": summary.location_name,
        "max_magnitude": summary.max_magnitude,
        "min_magnitude": summary.min_magnitude,
        "mean_magnitude": summary.mean_magnitude,
        "significance_score": summary.significance_score,
        "anchor_lat": summary.anchor_lat,
        "anchor_lon": summary.anchor_lon,
        "radius_km": summary.radius_km,
        "depth_range": summary.depth_range_text,
        "start_time_ms": summary.start_time_ms,
        "end_time_ms": summary.end_time_ms,
        "duration_hours": summary.duration_hours,
    }


async def find_by_stable_key(session: AsyncSession, stable_key: str) -> CatalogEntry | None:
    """Look up a definition's identity columns by stable key."""
    result = await session.execute(
        select(ClusterDefinition.id, ClusterDefinition.slug, ClusterDefinition.version).where(
            ClusterDefinition.stable_key == stable_key
        )
    )
    row = result.first()
    if row is None:
        return None
    return CatalogEntry(id=row.id, slug=row.slug, version=row.version or 1)


async def insert_if_absent(session: AsyncSession, values: dict) -> bool:
    """Insert a full definition row unless its stable key already exists.

    Args:
        session: Active async session (within a transaction).
        values: Column values, including ``id``, ``stable_key``, ``slug``
            and ``version``.

    Returns:
        ``True`` if the row was inserted, ``False`` if another writer got
        there first.

    Raises:
        sqlalchemy.exc.IntegrityError: On any other constraint violation
            (e.g. a slug collision).
        PersistenceError: If the database is neither PostgreSQL nor SQLite.
    """
    dialect = session.get_bind().dialect.name
    conflict_insert = _CONFLICT_INSERTS.get(dialect)
    if conflict_insert is None:
        raise PersistenceError(
            f"Unsupported catalog database {dialect!r}: needs INSERT ... ON CONFLICT",
            stable_key=values.get("stable_key"),
        )

    stmt = (
        conflict_insert(ClusterDefinition)
        .values(**values)
        .on_conflict_do_nothing(index_elements=["stable_key"])
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


async def update_if_version(
    session: AsyncSession,
    definition_id: str,
    expected_version: int,
    values: dict,
) -> bool:
    """Overwrite mutable fields and bump the version, if unchanged since read.

    Returns:
        ``True`` if exactly one row was updated, ``False`` if the row's
        version no longer matches ``expected_version``.
    """
    stmt = (
        update(ClusterDefinition)
        .where(
            ClusterDefinition.id == definition_id,
            ClusterDefinition.version == expected_version,
        )
        .values(
            **values,
            version=expected_version + 1,
            updated_at=sa.func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1
