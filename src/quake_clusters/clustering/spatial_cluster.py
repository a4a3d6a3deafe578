"""Spatial cluster finder using networkx connected components.

Builds an undirected graph whose nodes are events and whose edges join
events within ``max_distance_km`` of each other (great-circle distance).
Candidate edges come from a ``SpatialGrid`` rather than an all-pairs
scan.  Connected components of at least ``min_members`` events become
clusters.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import networkx as nx
import structlog

from quake_clusters.clustering.geo import haversine_km, is_valid_coordinate
from quake_clusters.clustering.spatial_index import SpatialGrid
from quake_clusters.clustering.types import Cluster, Event
from quake_clusters.errors import ClusteringError

logger = structlog.get_logger()


@dataclass
class FinderStats:
    """Counters for one finder invocation.

    Attributes:
        events_received: Events passed in.
        events_indexed: Events placed in the grid (valid, de-duplicated).
        events_excluded: Events dropped for malformed coordinates.
        duplicate_events: Repeated event IDs ignored after the first.
        candidate_checks: Distance computations performed.
        naive_checks: Distance computations an all-pairs scan would need.
        components: Connected components found, before the size filter.
    """

    events_received: int = 0
    events_indexed: int = 0
    events_excluded: int = 0
    duplicate_events: int = 0
    candidate_checks: int = 0
    naive_checks: int = 0
    components: int = 0


@dataclass
class ClusterResult:
    """Result of spatial clustering.

    Attributes:
        clusters: Clusters of at least ``min_members`` events.
        excluded_event_ids: IDs of events skipped for bad coordinates.
        stats: Work counters.
    """

    clusters: list[Cluster] = field(default_factory=list)
    excluded_event_ids: list[str] = field(default_factory=list)
    stats: FinderStats = field(default_factory=FinderStats)


def validate_event_location(event: Event) -> tuple[float, float]:
    """Return ``(lat, lon)`` for an event or raise ``ClusteringError``."""
    if not is_valid_coordinate(event.lat, event.lon):
        raise ClusteringError(
            f"Event {event.id} has malformed coordinates lat={event.lat!r} lon={event.lon!r}",
            event_id=event.id,
        )
    return event.lat, event.lon  # type: ignore[return-value]


def _cluster_sort_key(cluster: Cluster) -> tuple[float, str]:
    """Strongest clusters first; ties broken by smallest member ID."""
    return (-max(e.magnitude for e in cluster.events), min(e.id for e in cluster.events))


def find_clusters(
    events: list[Event],
    max_distance_km: float,
    min_members: int,
) -> ClusterResult:
    """Group events into spatially connected clusters.

    Two events are adjacent iff their haversine distance is at most
    ``max_distance_km``; clusters are the transitive closure of that
    relation.  Components with fewer than ``min_members`` events are
    discarded.  Events with malformed coordinates are excluded from the
    graph; repeated event IDs are counted once.

    Args:
        events: Events of the current window.
        max_distance_km: Neighbour radius in kilometres.
        min_members: Minimum cluster size.

    Returns:
        A ``ClusterResult``; clusters are ordered by descending maximum
        magnitude, then by smallest member ID.
    """
    result = ClusterResult()
    stats = result.stats
    stats.events_received = len(events)

    grid = SpatialGrid(max_distance_km)
    indexed: list[Event] = []
    seen_ids: set[str] = set()

    for event in events:
        if event.id in seen_ids:
            stats.duplicate_events += 1
            continue
        seen_ids.add(event.id)
        try:
            lat, lon = validate_event_location(event)
        except ClusteringError as e:
            logger.warning("event_excluded", event_id=e.event_id, reason=str(e))
            result.excluded_event_ids.append(event.id)
            continue
        grid.insert(len(indexed), lat, lon)
        indexed.append(event)

    stats.events_indexed = len(indexed)
    stats.events_excluded = len(result.excluded_event_ids)
    stats.naive_checks = len(indexed) * (len(indexed) - 1) // 2

    G = nx.Graph()
    G.add_nodes_from(range(len(indexed)))
    G.add_edges_from(grid.neighbor_pairs(haversine_km))
    stats.candidate_checks = grid.stats.candidate_checks

    for component in nx.connected_components(G):
        stats.components += 1
        if len(component) < min_members:
            continue
        members = sorted(
            (indexed[i] for i in component), key=lambda e: (e.occurred_at_ms, e.id)
        )
        result.clusters.append(Cluster(events=tuple(members)))

    result.clusters.sort(key=_cluster_sort_key)

    logger.info(
        "clusters_found",
        clusters=len(result.clusters),
        components=stats.components,
        events_indexed=stats.events_indexed,
        events_excluded=stats.events_excluded,
        candidate_checks=stats.candidate_checks,
        naive_checks=stats.naive_checks,
    )
    return result
