"""Tests for stable cluster key generation."""

from quake_clusters.clustering.config import IdentityConfig
from quake_clusters.clustering.types import Cluster, Event
from quake_clusters.identity import generate_stable_key
from quake_clusters.identity.stable_key import (
    geo_component,
    location_component,
    time_component,
)

T0 = 1_700_000_000_000
HOUR_MS = 3_600_000


def _make_event(event_id, mag=3.0, t=T0, place="10 km E of Ridgecrest, CA", lat=35.7, lon=-117.6):
    return Event(id=event_id, magnitude=mag, place=place, occurred_at_ms=t, lon=lon, lat=lat, depth_km=5.0)


class TestLocationComponent:
    def test_takes_text_after_last_of(self):
        assert location_component("10 km E of Ridgecrest, CA") == "ridgecrest-ca"

    def test_without_separator_uses_whole_text(self):
        assert location_component("Central Mid-Atlantic Ridge") == "central-mid-atlantic-ridge"

    def test_truncated_to_thirty_characters(self):
        result = location_component("5 km N of " + "a very long region name " * 3)
        assert len(result) <= 30

    def test_empty_falls_back(self):
        assert location_component("") == "unknown-location"
        assert location_component(None) == "unknown-location"
        assert location_component("!!!") == "unknown-location"


class TestComponents:
    def test_time_component_floors(self):
        assert time_component(T0, 6 * HOUR_MS) == 78703

    def test_geo_component_rounds(self):
        assert geo_component(35.66, -117.64) == "35.7--117.6"
        assert geo_component(35.66, -117.64, decimal_places=2) == "35.66--117.64"

    def test_geo_component_rounds_exact_ties_away_from_zero(self):
        assert geo_component(35.25, -117.25) == "35.3--117.3"


class TestGenerateStableKey:
    def test_reference_key(self):
        strongest = _make_event("a", mag=5.0)
        cluster = Cluster(events=(strongest, _make_event("b", t=T0 + HOUR_MS)))
        assert generate_stable_key(cluster, strongest) == "v1_ridgecrest-ca_78703_35.7--117.6"

    def test_same_key_when_minor_members_change(self):
        strongest = _make_event("main", mag=5.5)
        run1 = Cluster(events=(strongest, _make_event("a1", t=T0 + HOUR_MS)))
        run2 = Cluster(
            events=(
                strongest,
                _make_event("a1", t=T0 + HOUR_MS),
                _make_event("a2", t=T0 + 3 * HOUR_MS, lat=35.9),
            )
        )
        assert generate_stable_key(run1, strongest) == generate_stable_key(run2, strongest)

    def test_different_time_buckets_give_different_keys(self):
        first = _make_event("a", mag=5.0)
        later = _make_event("b", mag=5.0, t=T0 + 7 * 24 * HOUR_MS)
        assert generate_stable_key(Cluster(events=(first,)), first) != generate_stable_key(
            Cluster(events=(later,)), later
        )

    def test_custom_granularity(self):
        strongest = _make_event("a", mag=5.0, lat=35.66, lon=-117.64)
        config = IdentityConfig(time_bucket_hours=24, geo_bucket_decimal_places=2)
        key = generate_stable_key(Cluster(events=(strongest,)), strongest, config)
        assert key == f"v1_ridgecrest-ca_{T0 // (24 * HOUR_MS)}_35.66--117.64"

    def test_deterministic(self):
        strongest = _make_event("a", mag=5.0)
        cluster = Cluster(events=(strongest,))
        assert generate_stable_key(cluster, strongest) == generate_stable_key(cluster, strongest)
