"""Stable cluster identity.

Clusters are recomputed from scratch on every run, so their exact
membership drifts.  The stable key quantizes what does not drift for
"the same" real-world sequence -- the region of its strongest event, the
coarse start time, and the coarse position of the strongest event --
into a deterministic string:

    ``v1_{location}_{time_bucket}_{lat}-{lon}``

Bump ``STABLE_KEY_VERSION`` whenever the scheme changes so that new keys
never collide with keys written by an older scheme.
"""

from __future__ import annotations

import math
import re

from quake_clusters.clustering.config import IdentityConfig
from quake_clusters.clustering.summary import format_fixed
from quake_clusters.clustering.types import Cluster, Event

STABLE_KEY_VERSION = "v1"
UNKNOWN_LOCATION_COMPONENT = "unknown-location"
LOCATION_COMPONENT_MAX_LEN = 30

_RELATIVE_SEPARATOR = " of "
_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def location_component(place: str | None) -> str:
    """Normalize the region part of a place description.

    ``"10 km E of Ridgecrest, CA"`` becomes ``"ridgecrest-ca"``; text
    without a ``" of "`` separator is used whole.
    """
    if not place:
        return UNKNOWN_LOCATION_COMPONENT
    region = place.split(_RELATIVE_SEPARATOR)[-1]
    normalized = _DISALLOWED.sub("", region.lower()).strip()
    normalized = _WHITESPACE.sub("-", normalized)[:LOCATION_COMPONENT_MAX_LEN]
    return normalized or UNKNOWN_LOCATION_COMPONENT


def time_component(start_time_ms: int, time_bucket_ms: int) -> int:
    """Index of the time bucket the cluster started in."""
    return math.floor(start_time_ms / time_bucket_ms)


def geo_component(lat: float | None, lon: float | None, decimal_places: int = 1) -> str:
    """Rounded ``"lat-lon"`` of the strongest event."""
    if lat is None or lon is None:
        lat, lon = 0.0, 0.0
    return f"{format_fixed(lat, decimal_places)}-{format_fixed(lon, decimal_places)}"


def generate_stable_key(
    cluster: Cluster,
    strongest: Event,
    config: IdentityConfig | None = None,
) -> str:
    """Derive the stable key of a cluster.

    Two computations sharing the same strongest event and the same start
    time bucket produce the same key regardless of other membership.

    Args:
        cluster: The cluster (only its earliest time is used).
        strongest: The cluster's strongest event.
        config: Quantization granularity; defaults to 6 h / 1 decimal.
    """
    if config is None:
        config = IdentityConfig()

    start_time_ms = min(e.occurred_at_ms for e in cluster.events)
    parts = [
        STABLE_KEY_VERSION,
        location_component(strongest.place),
        str(time_component(start_time_ms, config.time_bucket_ms)),
        geo_component(strongest.lat, strongest.lon, config.geo_bucket_decimal_places),
    ]
    return "_".join(parts)
