"""CLI entry point: python -m quake_clusters.cli {run,preview}"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog

from quake_clusters.clustering.config import ClusteringConfig, load_clustering_config
from quake_clusters.clustering.spatial_cluster import find_clusters
from quake_clusters.clustering.summary import summarize_cluster
from quake_clusters.config.settings import get_settings
from quake_clusters.db.session import close_sessions, get_session_factory
from quake_clusters.errors import SourceFetchError, SummaryComputationError
from quake_clusters.identity.slug import generate_slug
from quake_clusters.identity.stable_key import generate_stable_key
from quake_clusters.ingestion.source import EventSource, FileEventSource, HttpEventSource
from quake_clusters.logging_config import configure_logging
from quake_clusters.worker.orchestrator import is_significant, run_cluster_sync


async def run_once(source: EventSource, config: ClusteringConfig) -> dict:
    """Execute one synchronizing run against the configured database."""
    try:
        summary = await run_cluster_sync(source, get_session_factory(), config)
    finally:
        await close_sessions()
    return summary.as_dict()


async def preview(source: EventSource, config: ClusteringConfig) -> list[dict]:
    """Cluster the source window and describe each cluster without persisting."""
    log = structlog.get_logger()
    events = await source.fetch_events()
    result = find_clusters(events, config.grouping.max_distance_km, config.grouping.min_members)

    rows = []
    for cluster in result.clusters:
        try:
            summary = summarize_cluster(cluster)
        except SummaryComputationError as e:
            log.warning("cluster_summary_failed", error=str(e))
            continue
        stable_key = generate_stable_key(cluster, summary.strongest_event, config.identity)
        rows.append(
            {
                "stable_key": stable_key,
                "slug": generate_slug(
                    summary.event_count, summary.location_name, summary.max_magnitude, stable_key
                ),
                "significant": is_significant(summary, config),
                "title": summary.title,
                "event_count": summary.event_count,
                "strongest_event_id": summary.strongest_event.id,
                "max_magnitude": summary.max_magnitude,
                "depth_range": summary.depth_range_text,
                "duration_hours": round(summary.duration_hours, 2),
                "significance_score": round(summary.significance_score, 3),
            }
        )
    return rows


def _build_source(args: argparse.Namespace) -> EventSource:
    settings = get_settings()
    if args.file:
        return FileEventSource(Path(args.file))
    return HttpEventSource(args.url or settings.feed_url, timeout=settings.feed_timeout_seconds)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="quake_clusters.cli",
        description="Seismic cluster sync CLI",
    )
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("run", "Run one cluster sync against the catalog database"),
        ("preview", "Print clusters for a feed without touching the database"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--url", type=str, default=None, help="Feed URL (default: settings)")
        sub.add_argument("--file", type=str, default=None, help="Local GeoJSON feed file")
        sub.add_argument(
            "--config",
            type=str,
            default=None,
            help="Clustering YAML config (default: settings)",
        )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    configure_logging(json_output=settings.log_json, log_level=settings.log_level, stream=sys.stderr)
    config_path = Path(args.config) if args.config else settings.clustering_config_path
    config = load_clustering_config(config_path)
    source = _build_source(args)

    if args.command == "run":
        result = asyncio.run(run_once(source, config))
        print(json.dumps(result, indent=2))
        if result["status"] != "completed":
            sys.exit(2)
    elif args.command == "preview":
        try:
            rows = asyncio.run(preview(source, config))
        except SourceFetchError as e:
            print(f"error: {e}", file=sys.stderr)
            sys.exit(2)
        print(json.dumps(rows, indent=2))


if __name__ == "__main__":
    main()
