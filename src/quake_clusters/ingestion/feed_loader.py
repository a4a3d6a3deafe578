"""GeoJSON feed parser for USGS-style earthquake feature collections."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from quake_clusters.clustering.types import Event

logger = logging.getLogger(__name__)


class FeatureProperties(BaseModel):
    mag: float | None = None
    place: str | None = None
    time: int | None = None
    # Allow all other USGS properties (felt, tsunami, url, ...)
    model_config = ConfigDict(extra="allow")


class FeatureGeometry(BaseModel):
    type: str | None = None
    # Kept loose: malformed coordinates are excluded later by the finder
    coordinates: list | None = None
    model_config = ConfigDict(extra="allow")


class Feature(BaseModel):
    id: str | None = None
    properties: FeatureProperties = FeatureProperties()
    geometry: FeatureGeometry | None = None
    model_config = ConfigDict(extra="allow")


class FeatureCollection(BaseModel):
    type: str | None = None
    # Raw features; each one is validated on its own in parse_feature_collection
    features: list = []
    metadata: dict | None = None
    model_config = ConfigDict(extra="allow")


def _as_finite_float(value) -> float | None:
    """Return ``value`` as a finite float, or ``None`` if it is not numeric."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def feature_to_event(feature: Feature) -> Event | None:
    """Convert a GeoJSON feature to an ``Event``.

    Returns ``None`` when the feature lacks an id, a magnitude, or an
    origin time -- such records cannot be clustered or summarized.
    A non-numeric depth becomes ``None``; malformed coordinates are kept
    as ``None`` so the finder can report and exclude them.
    """
    props = feature.properties
    if not feature.id or props.mag is None or props.time is None:
        return None

    coords = (feature.geometry.coordinates if feature.geometry else None) or []
    lon = _as_finite_float(coords[0]) if len(coords) > 0 else None
    lat = _as_finite_float(coords[1]) if len(coords) > 1 else None
    depth = _as_finite_float(coords[2]) if len(coords) > 2 else None

    return Event(
        id=feature.id,
        magnitude=props.mag,
        place=props.place or "",
        occurred_at_ms=props.time,
        lon=lon,
        lat=lat,
        depth_km=depth,
    )


def parse_feature_collection(data: dict) -> list[Event]:
    """Validate a decoded feed payload and convert its features to events.

    Features are validated one at a time: a feature with a non-numeric
    magnitude, a fractional time or an otherwise malformed shape is
    skipped and logged, and the rest of the collection is still used.

    Raises:
        pydantic.ValidationError: If the payload is not a feature collection.
    """
    collection = FeatureCollection.model_validate(data)
    events: list[Event] = []
    incomplete = 0
    invalid = 0
    for index, raw in enumerate(collection.features):
        try:
            feature = Feature.model_validate(raw)
        except ValidationError as e:
            invalid += 1
            logger.warning("Skipping invalid feed feature #%d: %s", index, e.errors()[0]["msg"])
            continue
        event = feature_to_event(feature)
        if event is None:
            incomplete += 1
            continue
        events.append(event)

    if incomplete:
        logger.warning("Skipped %d feed features without id, magnitude or time", incomplete)
    if invalid:
        logger.warning("Skipped %d feed features that failed validation", invalid)
    return events


def load_feed_file(file_path: Path) -> list[Event]:
    """Load and parse a GeoJSON feed stored on disk.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON.
        pydantic.ValidationError: If the JSON is not a feature collection.
    """
    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)
    return parse_feature_collection(data)
