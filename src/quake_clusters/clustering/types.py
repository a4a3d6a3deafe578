"""In-memory value types shared by the clustering stages."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Event:
    """A single point-located seismic event for the current window.

    Attributes:
        id: Provider event ID.
        magnitude: Reported magnitude.
        place: Human-readable place text (``"10 km E of Ridgecrest, CA"``).
        occurred_at_ms: Origin time, milliseconds since the Unix epoch.
        lon: Longitude in decimal degrees (``None`` if malformed upstream).
        lat: Latitude in decimal degrees (``None`` if malformed upstream).
        depth_km: Hypocentre depth, ``None`` when missing or non-numeric.
    """

    id: str
    magnitude: float
    place: str
    occurred_at_ms: int
    lon: float | None
    lat: float | None
    depth_km: float | None = None


@dataclass(frozen=True)
class Cluster:
    """A connected group of events, created fresh for every run.

    ``events`` is ordered by ``(occurred_at_ms, id)`` so that iteration
    is reproducible, but callers must not attach meaning to the order.
    """

    events: tuple[Event, ...]

    def __len__(self) -> int:
        return len(self.events)

    @property
    def event_ids(self) -> list[str]:
        return [e.id for e in self.events]
