"""Fixed-interval scheduler for cluster sync runs.

Runs one sync immediately, then one per interval until ``stop_event`` is
set.  Runs never overlap within a process: the next tick starts only
after the previous run returned.
"""

from __future__ import annotations

import asyncio
import time

import structlog
from sqlalchemy.ext.asyncio import async_sessionmaker

from quake_clusters.clustering.config import ClusteringConfig
from quake_clusters.ingestion.source import EventSource
from quake_clusters.worker.orchestrator import run_cluster_sync


async def run_periodically(
    source: EventSource,
    session_factory: async_sessionmaker,
    config: ClusteringConfig,
    interval_seconds: float,
    stop_event: asyncio.Event,
    max_runs: int | None = None,
) -> int:
    """Run ``run_cluster_sync`` every ``interval_seconds``.

    Args:
        source: Event source adapter.
        session_factory: Async session factory for catalog access.
        config: Clustering configuration.
        interval_seconds: Time between run starts.  A run that takes
            longer than the interval is followed immediately by the next.
        stop_event: Set to end the loop after the current run.
        max_runs: Optional cap on the number of runs (used by tests).

    Returns:
        Number of runs performed.
    """
    log = structlog.get_logger().bind(interval_seconds=interval_seconds)
    log.info("scheduler_started")
    runs = 0

    while not stop_event.is_set():
        started = time.monotonic()
        summary = await run_cluster_sync(source, session_factory, config)
        runs += 1
        log.info("scheduled_run_finished", run=runs, status=summary.status, errors=summary.errors)

        if max_runs is not None and runs >= max_runs:
            break

        remaining = max(0.0, interval_seconds - (time.monotonic() - started))
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=remaining)
        except asyncio.TimeoutError:
            pass

    log.info("scheduler_stopped", runs=runs)
    return runs
