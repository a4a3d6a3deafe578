"""Persistence synchronizer: create-or-update a definition per stable key.

Per stable key the catalog moves ``Unseen -> Created -> Updated*``:

- Unseen: a slug is generated and the row is inserted with ``version=1``.
- Seen: the mutable fields are overwritten and ``version`` goes up by 1;
  ``slug``, ``stable_key`` and ``created_at`` are left untouched.

Both writes are conditional, so two overlapping runs racing on the same
key cannot lose an increment or insert a second row.  A lost race is
resolved by re-reading the row and trying again.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quake_clusters.catalog.repository import (
    find_by_stable_key,
    insert_if_absent,
    summary_to_values,
    update_if_version,
)
from quake_clusters.clustering.summary import ClusterSummary
from quake_clusters.errors import PersistenceError
from quake_clusters.identity.slug import generate_slug

logger = structlog.get_logger()

MAX_WRITE_ATTEMPTS = 3


@dataclass(frozen=True)
class SyncOutcome:
    """What the synchronizer did for one stable key.

    Attributes:
        action: ``"created"`` or ``"updated"``.
        definition_id: Internal row ID.
        stable_key: The cluster's stable key.
        slug: The (immutable) slug of the row.
        version: Row version after the write.
    """

    action: str
    definition_id: str
    stable_key: str
    slug: str
    version: int


async def sync_cluster(
    session: AsyncSession,
    summary: ClusterSummary,
    stable_key: str,
    max_attempts: int = MAX_WRITE_ATTEMPTS,
) -> SyncOutcome:
    """Create or update the definition for ``stable_key``.

    Must be called within an active ``session.begin()`` context.

    Raises:
        PersistenceError: If every attempt lost a race against another writer.
    """
    log = logger.bind(stable_key=stable_key)
    values = summary_to_values(summary)

    for attempt in range(1, max_attempts + 1):
        existing = await find_by_stable_key(session, stable_key)

        if existing is None:
            definition_id = str(uuid.uuid4())
            slug = generate_slug(
                summary.event_count, summary.location_name, summary.max_magnitude, stable_key
            )
            inserted = await insert_if_absent(
                session,
                {
                    **values,
                    "id": definition_id,
                    "stable_key": stable_key,
                    "slug": slug,
                    "version": 1,
                },
            )
            if inserted:
                log.info("cluster_definition_created", definition_id=definition_id, slug=slug)
                return SyncOutcome("created", definition_id, stable_key, slug, 1)
            log.warning("cluster_insert_conflict", attempt=attempt)
            continue

        if await update_if_version(session, existing.id, existing.version, values):
            new_version = existing.version + 1
            log.info(
                "cluster_definition_updated",
                definition_id=existing.id,
                version=new_version,
                event_count=summary.event_count,
            )
            return SyncOutcome("updated", existing.id, stable_key, existing.slug, new_version)
        log.warning("cluster_update_conflict", attempt=attempt, expected_version=existing.version)

    raise PersistenceError(
        f"Gave up after {max_attempts} conflicting writes for {stable_key}",
        stable_key=stable_key,
    )


async def persist_cluster(
    session_factory: async_sessionmaker,
    summary: ClusterSummary,
    stable_key: str,
) -> SyncOutcome:
    """Run ``sync_cluster`` in its own transaction.

    A failure rolls back only this cluster's write.

    Raises:
        PersistenceError: On any database error, tagged with ``stable_key``.
    """
    try:
        async with session_factory() as session, session.begin():
            return await sync_cluster(session, summary, stable_key)
    except SQLAlchemyError as e:
        raise PersistenceError(f"Catalog write failed for {stable_key}: {e}", stable_key=stable_key) from e
