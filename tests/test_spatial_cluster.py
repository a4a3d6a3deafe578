"""Tests for the spatial cluster finder."""

from __future__ import annotations

import random

import networkx as nx
import pytest

from quake_clusters.clustering import Cluster, ClusterResult, Event, find_clusters
from quake_clusters.clustering.geo import haversine_km
from quake_clusters.clustering.spatial_cluster import validate_event_location
from quake_clusters.errors import ClusteringError

HOUR_MS = 3_600_000
T0 = 1_700_000_000_000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_event(
    event_id: str,
    lat: float | None = 35.0,
    lon: float | None = -117.0,
    mag: float = 3.0,
    t: int = T0,
    place: str = "10 km E of Ridgecrest, CA",
    depth: float | None = 5.0,
) -> Event:
    """Create an Event with sensible defaults."""
    return Event(
        id=event_id,
        magnitude=mag,
        place=place,
        occurred_at_ms=t,
        lon=lon,
        lat=lat,
        depth_km=depth,
    )


def _ids(cluster: Cluster) -> set[str]:
    return {e.id for e in cluster.events}


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_two_nearby_events_form_one_cluster(self):
        """A(M5.0) and B(M4.0, +1h, ~33 km away) cluster together at 100 km."""
        a = _make_event("A", lat=35.0, mag=5.0, t=0, place="10km E of X")
        b = _make_event("B", lat=35.3, mag=4.0, t=HOUR_MS)
        result = find_clusters([a, b], max_distance_km=100, min_members=2)
        assert len(result.clusters) == 1
        assert _ids(result.clusters[0]) == {"A", "B"}

    def test_min_members_above_size_emits_nothing(self):
        a = _make_event("A", lat=35.0, mag=5.0, t=0)
        b = _make_event("B", lat=35.3, mag=4.0, t=HOUR_MS)
        result = find_clusters([a, b], max_distance_km=100, min_members=3)
        assert result.clusters == []

    def test_empty_input(self):
        result = find_clusters([], max_distance_km=100, min_members=1)
        assert isinstance(result, ClusterResult)
        assert result.clusters == []


class TestConnectivity:
    def test_transitive_chain(self):
        """A-B and B-C are within range, A-C is not; all three join."""
        a = _make_event("A", lat=0.0, lon=0.0)
        b = _make_event("B", lat=0.0, lon=0.8)
        c = _make_event("C", lat=0.0, lon=1.6)
        assert haversine_km(0.0, 0.0, 0.0, 1.6) > 100
        result = find_clusters([a, b, c], max_distance_km=100, min_members=3)
        assert len(result.clusters) == 1
        assert _ids(result.clusters[0]) == {"A", "B", "C"}

    def test_separate_clusters(self):
        events = [
            _make_event("ca1", lat=35.0, lon=-117.0),
            _make_event("ca2", lat=35.1, lon=-117.0),
            _make_event("ak1", lat=57.3, lon=-152.9),
            _make_event("ak2", lat=57.4, lon=-152.9),
        ]
        result = find_clusters(events, max_distance_km=50, min_members=2)
        assert sorted(sorted(_ids(c)) for c in result.clusters) == [["ak1", "ak2"], ["ca1", "ca2"]]

    def test_coincident_events_are_adjacent(self):
        events = [_make_event("a"), _make_event("b")]
        result = find_clusters(events, max_distance_km=0.0, min_members=2)
        assert len(result.clusters) == 1

    def test_boundary_distance_is_inclusive(self):
        a = _make_event("a", lat=0.0, lon=0.0)
        b = _make_event("b", lat=0.5, lon=0.0)
        d = haversine_km(0.0, 0.0, 0.5, 0.0)
        assert len(find_clusters([a, b], max_distance_km=d, min_members=2).clusters) == 1

    def test_cluster_across_antimeridian(self):
        events = [
            _make_event("fiji1", lat=-17.8, lon=179.95),
            _make_event("fiji2", lat=-17.9, lon=-179.95),
            _make_event("fiji3", lat=-17.7, lon=179.8),
        ]
        result = find_clusters(events, max_distance_km=50, min_members=3)
        assert len(result.clusters) == 1

    @pytest.mark.parametrize("seed", [11, 12])
    def test_every_cluster_is_connected_and_large_enough(self, seed):
        rng = random.Random(seed)
        events = [
            _make_event(f"e{i}", lat=rng.uniform(30, 40), lon=rng.uniform(-125, -115))
            for i in range(250)
        ]
        max_km, min_members = 40.0, 3
        result = find_clusters(events, max_distance_km=max_km, min_members=min_members)

        seen: set[str] = set()
        for cluster in result.clusters:
            assert len(cluster) >= min_members
            ids = _ids(cluster)
            assert not ids & seen, "event appears in two clusters"
            seen |= ids

            g = nx.Graph()
            g.add_nodes_from(e.id for e in cluster.events)
            for i, x in enumerate(cluster.events):
                for y in cluster.events[i + 1 :]:
                    if haversine_km(x.lat, x.lon, y.lat, y.lon) <= max_km:
                        g.add_edge(x.id, y.id)
            assert nx.is_connected(g)

    def test_matches_all_pairs_components(self):
        rng = random.Random(99)
        events = [
            _make_event(f"e{i}", lat=rng.uniform(-5, 5), lon=rng.uniform(-5, 5)) for i in range(150)
        ]
        g = nx.Graph()
        g.add_nodes_from(e.id for e in events)
        for i, x in enumerate(events):
            for y in events[i + 1 :]:
                if haversine_km(x.lat, x.lon, y.lat, y.lon) <= 60.0:
                    g.add_edge(x.id, y.id)
        expected = sorted(sorted(c) for c in nx.connected_components(g) if len(c) >= 2)

        result = find_clusters(events, max_distance_km=60.0, min_members=2)
        assert sorted(sorted(_ids(c)) for c in result.clusters) == expected


class TestInputHygiene:
    def test_malformed_coordinates_excluded(self):
        events = [
            _make_event("good1"),
            _make_event("good2", lat=35.1),
            _make_event("nolat", lat=None),
            _make_event("nan", lon=float("nan")),
            _make_event("offglobe", lat=123.0),
        ]
        result = find_clusters(events, max_distance_km=50, min_members=2)
        assert len(result.clusters) == 1
        assert _ids(result.clusters[0]) == {"good1", "good2"}
        assert sorted(result.excluded_event_ids) == ["nan", "nolat", "offglobe"]
        assert result.stats.events_excluded == 3

    def test_validate_event_location_raises(self):
        with pytest.raises(ClusteringError) as exc_info:
            validate_event_location(_make_event("bad", lat=None))
        assert exc_info.value.event_id == "bad"

    def test_duplicate_ids_counted_once(self):
        events = [_make_event("a"), _make_event("a"), _make_event("b", lat=35.1)]
        result = find_clusters(events, max_distance_km=50, min_members=2)
        assert [e.id for e in result.clusters[0].events].count("a") == 1
        assert result.stats.duplicate_events == 1


class TestOrdering:
    def test_members_sorted_by_time_then_id(self):
        events = [
            _make_event("c", t=T0 + 2 * HOUR_MS),
            _make_event("b", t=T0),
            _make_event("a", t=T0),
        ]
        result = find_clusters(events, max_distance_km=10, min_members=1)
        assert [e.id for e in result.clusters[0].events] == ["a", "b", "c"]

    def test_clusters_sorted_by_strongest_magnitude(self):
        events = [
            _make_event("weak1", lat=10.0, mag=2.0),
            _make_event("weak2", lat=10.05, mag=2.5),
            _make_event("strong1", lat=-10.0, mag=6.1),
            _make_event("strong2", lat=-10.05, mag=3.0),
        ]
        result = find_clusters(events, max_distance_km=20, min_members=2)
        assert [max(e.magnitude for e in c.events) for c in result.clusters] == [6.1, 2.5]

    def test_result_independent_of_input_order(self):
        events = [_make_event(f"e{i}", lat=35 + i * 0.1) for i in range(6)]
        forward = find_clusters(events, max_distance_km=20, min_members=2)
        backward = find_clusters(list(reversed(events)), max_distance_km=20, min_members=2)
        assert forward.clusters == backward.clusters
