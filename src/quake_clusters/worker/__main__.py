"""Scheduled worker entry point: python -m quake_clusters.worker"""

import asyncio
import signal

import structlog

from quake_clusters.clustering.config import load_clustering_config
from quake_clusters.config.settings import get_settings
from quake_clusters.db.session import close_sessions, get_session_factory
from quake_clusters.ingestion.source import HttpEventSource
from quake_clusters.logging_config import configure_logging
from quake_clusters.worker.scheduler import run_periodically


async def main() -> None:
    settings = get_settings()
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
    log = structlog.get_logger()

    session_factory = get_session_factory()
    clustering_config = load_clustering_config(settings.clustering_config_path)
    source = HttpEventSource(settings.feed_url, timeout=settings.feed_timeout_seconds)

    log.info(
        "worker_starting",
        feed_url=settings.feed_url,
        interval_minutes=settings.run_interval_minutes,
        database=settings.database_url.split("@")[-1],
    )

    # Graceful shutdown via SIGTERM/SIGINT
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop_event.set)

    runs = await run_periodically(
        source,
        session_factory,
        clustering_config,
        interval_seconds=settings.run_interval_minutes * 60,
        stop_event=stop_event,
    )
    await close_sessions()
    log.info("worker_shutdown", runs=runs)


if __name__ == "__main__":
    asyncio.run(main())
