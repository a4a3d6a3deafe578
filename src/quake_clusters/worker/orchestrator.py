"""Run orchestrator bridging the event source, clustering, and the catalog.

One call to ``run_cluster_sync`` is one scheduled run:

1. Fetch the event window (a failure aborts the run; nothing is written)
2. Find spatial clusters (pure function)
3. Per cluster: summarize, apply the significance thresholds, derive the
   stable key, and create-or-update its catalog row

Per-cluster failures are recorded in the returned ``RunSummary`` and never
stop the remaining clusters.  Nothing is retried within a run -- the next
scheduled run repeats the idempotent, stable-key-keyed writes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

import structlog
from sqlalchemy.ext.asyncio import async_sessionmaker

from quake_clusters.catalog.synchronizer import persist_cluster
from quake_clusters.clustering.config import ClusteringConfig
from quake_clusters.clustering.spatial_cluster import find_clusters
from quake_clusters.clustering.summary import ClusterSummary, summarize_cluster
from quake_clusters.clustering.types import Cluster
from quake_clusters.errors import PersistenceError, SourceFetchError, SummaryComputationError
from quake_clusters.identity.stable_key import generate_stable_key
from quake_clusters.ingestion.source import EventSource

logger = structlog.get_logger()


@dataclass
class RunFailure:
    """A per-cluster failure recorded during a run."""

    stage: str
    error: str
    stable_key: str | None = None


@dataclass
class RunSummary:
    """Operator-visible outcome of one run.

    Attributes:
        status: ``"completed"`` or ``"aborted"`` (fetch failed).
        events: Events received from the source.
        candidate_clusters: Clusters produced by the finder.
        significant_clusters: Clusters that cleared both thresholds.
        processed: Definitions created or updated.
        created: Of ``processed``, newly created definitions.
        updated: Of ``processed``, updated definitions.
        errors: Failed clusters (plus 1 for an aborted fetch).
        failures: Details for each error.
    """

    status: str = "completed"
    events: int = 0
    candidate_clusters: int = 0
    significant_clusters: int = 0
    processed: int = 0
    created: int = 0
    updated: int = 0
    errors: int = 0
    failures: list[RunFailure] = field(default_factory=list)

    def record_failure(self, stage: str, error: Exception, stable_key: str | None = None) -> None:
        self.errors += 1
        self.failures.append(RunFailure(stage=stage, error=str(error), stable_key=stable_key))

    def as_dict(self) -> dict:
        return asdict(self)


def is_significant(summary: ClusterSummary, config: ClusteringConfig) -> bool:
    """Both thresholds are inclusive."""
    return (
        summary.event_count >= config.grouping.min_members
        and summary.strongest_event.magnitude >= config.significance.min_significant_magnitude
    )


async def run_cluster_sync(
    source: EventSource,
    session_factory: async_sessionmaker,
    config: ClusteringConfig | None = None,
) -> RunSummary:
    """Full run: fetch -> cluster -> summarize -> identify -> persist.

    Args:
        source: Event source adapter for the current window.
        session_factory: Async session factory for catalog access.
        config: Clustering configuration; defaults if ``None``.

    Returns:
        The run summary.  Never raises for per-cluster or fetch failures.
    """
    if config is None:
        config = ClusteringConfig()
    summary = RunSummary()

    try:
        events = await source.fetch_events()
    except SourceFetchError as e:
        logger.error("run_aborted", reason=str(e))
        summary.status = "aborted"
        summary.record_failure("fetch", e)
        return summary
    except Exception as e:
        logger.error("run_aborted", reason=str(e), exc_info=True)
        summary.status = "aborted"
        summary.record_failure("fetch", SourceFetchError(str(e)))
        return summary

    summary.events = len(events)
    if not events:
        logger.info("run_complete", **_counts(summary))
        return summary

    try:
        result = find_clusters(
            events, config.grouping.max_distance_km, config.grouping.min_members
        )
    except Exception as e:
        logger.error("clustering_failed", error=str(e), exc_info=True)
        summary.status = "aborted"
        summary.record_failure("clustering", e)
        return summary
    summary.candidate_clusters = len(result.clusters)

    for cluster in result.clusters:
        try:
            await _process_cluster(cluster, session_factory, config, summary)
        except Exception as e:
            logger.error(
                "cluster_processing_failed",
                event_ids=cluster.event_ids[:10],
                error=str(e),
                exc_info=True,
            )
            summary.record_failure("unexpected", e)

    logger.info("run_complete", **_counts(summary))
    return summary


async def _process_cluster(
    cluster: Cluster,
    session_factory: async_sessionmaker,
    config: ClusteringConfig,
    summary: RunSummary,
) -> None:
    """Summarize, filter, identify and persist a single cluster."""
    try:
        cluster_summary = summarize_cluster(cluster)
    except SummaryComputationError as e:
        logger.warning("cluster_summary_failed", event_ids=cluster.event_ids[:10], error=str(e))
        summary.record_failure("summary", e)
        return

    if not is_significant(cluster_summary, config):
        return
    summary.significant_clusters += 1

    stable_key = generate_stable_key(cluster, cluster_summary.strongest_event, config.identity)
    try:
        outcome = await persist_cluster(session_factory, cluster_summary, stable_key)
    except PersistenceError as e:
        logger.error("cluster_persist_failed", stable_key=stable_key, error=str(e))
        summary.record_failure("persistence", e, stable_key=e.stable_key or stable_key)
        return

    summary.processed += 1
    if outcome.action == "created":
        summary.created += 1
    else:
        summary.updated += 1


def _counts(summary: RunSummary) -> dict:
    return {
        "events": summary.events,
        "candidate_clusters": summary.candidate_clusters,
        "significant_clusters": summary.significant_clusters,
        "processed": summary.processed,
        "created": summary.created,
        "updated": summary.updated,
        "errors": summary.errors,
    }
