"""Per-cluster derived statistics.

All functions are PURE -- the summary is computed once per cluster and
then handed to the identity and persistence stages unchanged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from quake_clusters.clustering.geo import haversine_km
from quake_clusters.clustering.types import Cluster, Event
from quake_clusters.errors import SummaryComputationError

MILLIS_PER_HOUR = 3_600_000
UNKNOWN_LOCATION = "Unknown Location"
UNKNOWN_DEPTH = "Unknown"


def format_fixed(value: float, places: int = 1) -> str:
    """Format with a fixed number of decimals, rounding exact ties away from zero.

    Ties are judged on the exact binary value, so ``7.25`` gives ``"7.3"``
    while ``0.15`` (stored as 0.1499...) gives ``"0.1"``.
    """
    quantum = Decimal(1).scaleb(-places)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):f}"


@dataclass(frozen=True)
class ClusterSummary:
    """Statistics derived from one cluster.

    ``anchor_lat``/``anchor_lon`` are the strongest event's coordinates,
    not a centroid of all members.
    """

    strongest_event: Event
    min_magnitude: float
    max_magnitude: float
    mean_magnitude: float
    start_time_ms: int
    end_time_ms: int
    duration_hours: float
    location_name: str
    anchor_lat: float
    anchor_lon: float
    depth_range_text: str
    event_ids: list[str]
    significance_score: float
    radius_km: float
    title: str
    description: str

    @property
    def event_count(self) -> int:
        return len(self.event_ids)


def strongest_event(events: tuple[Event, ...] | list[Event]) -> Event:
    """Return the event with the highest magnitude.

    Ties are broken by the lexicographically smallest event ID, so the
    result does not depend on member order.
    """
    if not events:
        raise SummaryComputationError("Cannot pick the strongest event of an empty cluster")
    return min(events, key=lambda e: (-e.magnitude, e.id))


def depth_range_text(events: tuple[Event, ...] | list[Event]) -> str:
    """Format the depth span of members with a numeric depth, e.g. ``"5.0-12.3km"``."""
    depths = [
        e.depth_km
        for e in events
        if isinstance(e.depth_km, (int, float))
        and not isinstance(e.depth_km, bool)
        and math.isfinite(e.depth_km)
    ]
    if not depths:
        return UNKNOWN_DEPTH
    return f"{format_fixed(min(depths))}-{format_fixed(max(depths))}km"


def significance_score(max_magnitude: float, member_count: int) -> float:
    """Ranking score: ``max_magnitude * log10(member_count)``, 0 for no members."""
    if member_count <= 0:
        return 0.0
    return max_magnitude * math.log10(member_count)


def cluster_title(event_count: int, location_name: str, max_magnitude: float) -> str:
    return f"Cluster: {event_count} events near {location_name}, max M{format_fixed(max_magnitude)}"


def cluster_description(
    event_count: int, location_name: str, max_magnitude: float, duration_hours: float
) -> str:
    duration = f"approx {format_fixed(duration_hours)} hours" if duration_hours > 0 else "a short period"
    return (
        f"A cluster of {event_count} earthquakes occurred near {location_name}. "
        f"Strongest: M{format_fixed(max_magnitude)}. Duration: {duration}."
    )


def summarize_cluster(cluster: Cluster) -> ClusterSummary:
    """Compute the ``ClusterSummary`` for a cluster.

    Raises:
        SummaryComputationError: If the cluster is empty or a member has a
            non-finite magnitude or time.
    """
    events = cluster.events
    if not events:
        raise SummaryComputationError("Cannot summarize an empty cluster")

    for e in events:
        if not math.isfinite(e.magnitude):
            raise SummaryComputationError(f"Event {e.id} has non-finite magnitude {e.magnitude!r}")
        if not isinstance(e.occurred_at_ms, int):
            raise SummaryComputationError(f"Event {e.id} has invalid time {e.occurred_at_ms!r}")

    strongest = strongest_event(events)
    if strongest.lat is None or strongest.lon is None:
        raise SummaryComputationError(f"Strongest event {strongest.id} has no coordinates")

    magnitudes = [e.magnitude for e in events]
    times = [e.occurred_at_ms for e in events]
    start, end = min(times), max(times)
    duration_hours = (end - start) / MILLIS_PER_HOUR if end > start else 0.0
    location_name = strongest.place.strip() or UNKNOWN_LOCATION
    max_magnitude = max(magnitudes)

    radius_km = max(
        (
            haversine_km(strongest.lat, strongest.lon, e.lat, e.lon)
            for e in events
            if e.lat is not None and e.lon is not None
        ),
        default=0.0,
    )

    return ClusterSummary(
        strongest_event=strongest,
        min_magnitude=min(magnitudes),
        max_magnitude=max_magnitude,
        mean_magnitude=sum(magnitudes) / len(magnitudes),
        start_time_ms=start,
        end_time_ms=end,
        duration_hours=duration_hours,
        location_name=location_name,
        anchor_lat=strongest.lat,
        anchor_lon=strongest.lon,
        depth_range_text=depth_range_text(events),
        event_ids=[e.id for e in events],
        significance_score=significance_score(max_magnitude, len(events)),
        radius_km=radius_km,
        title=cluster_title(len(events), location_name, max_magnitude),
        description=cluster_description(len(events), location_name, max_magnitude, duration_hours),
    )
