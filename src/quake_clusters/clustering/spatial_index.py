"""Spatial grid index for neighbour search on the sphere.

Points are bucketed into latitude/longitude cells whose side is the
angular equivalent of ``max_distance_km``.  A neighbour query only looks
at the three latitude rows around the point and at the longitude columns
that can possibly hold a point within range, which keeps candidate pair
generation close to linear for geographically spread data while never
missing a true neighbour:

- Any two points within ``d`` km differ in latitude by at most ``d / R``
  radians, i.e. one cell, so rows ``r - 1 .. r + 1`` suffice.
- From the haversine identity, ``sin(dlon / 2) <= sin(d / 2R) /
  sqrt(cos(lat1) * cos(lat2))``.  Bounding ``cos(lat2)`` from below over
  the reachable latitude band gives the widest longitude offset that
  still needs checking; near the poles this covers the whole row.
- Longitude columns wrap around the antimeridian.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass

from quake_clusters.clustering.geo import EARTH_RADIUS_KM

# Floor on the cell size so that a zero radius (coincident points only)
# still yields a finite grid
MIN_CELL_DEG = 1e-4

# Relative slack applied to angular bounds to absorb floating point error
_SLACK = 1e-9


@dataclass
class GridStats:
    """Counters describing how much work the index saved.

    Attributes:
        points: Number of points inserted.
        occupied_cells: Number of non-empty cells.
        candidate_checks: Candidate pairs produced by queries.
    """

    points: int = 0
    occupied_cells: int = 0
    candidate_checks: int = 0


class SpatialGrid:
    """Lat/lon bucket index keyed by ``(row, col)`` cells.

    Args:
        max_distance_km: Neighbour radius; determines the cell size.
    """

    def __init__(self, max_distance_km: float) -> None:
        self.max_distance_km = max_distance_km
        self._angular_radius = max_distance_km / EARTH_RADIUS_KM
        self.cell_deg = max(math.degrees(self._angular_radius) * (1 + _SLACK), MIN_CELL_DEG)
        self.n_rows = math.ceil(180.0 / self.cell_deg)
        self.n_cols = math.ceil(360.0 / self.cell_deg)
        # Radius covers at least half the globe: every point is a candidate
        self._covers_globe = self._angular_radius >= math.pi
        self._rows: dict[int, dict[int, list[int]]] = {}
        self._points: dict[int, tuple[float, float]] = {}
        self.stats = GridStats()

    def _row(self, lat: float) -> int:
        return min(int(math.floor((lat + 90.0) / self.cell_deg)), self.n_rows - 1)

    def _col(self, lon: float) -> int:
        return min(int(math.floor((lon + 180.0) / self.cell_deg)), self.n_cols - 1)

    def insert(self, key: int, lat: float, lon: float) -> None:
        """Add a point under an integer key (caller guarantees uniqueness)."""
        row, col = self._row(lat), self._col(lon)
        cells = self._rows.setdefault(row, {})
        if col not in cells:
            cells[col] = []
            self.stats.occupied_cells += 1
        cells[col].append(key)
        self._points[key] = (lat, lon)
        self.stats.points += 1

    def _column_span(self, lat: float) -> int | None:
        """Number of columns to scan on each side, or ``None`` for the full row."""
        if self._covers_globe:
            return None
        reach_deg = math.degrees(self._angular_radius)
        far_lat = min(90.0, abs(lat) + reach_deg)
        cos_product = math.cos(math.radians(lat)) * math.cos(math.radians(far_lat))
        if cos_product <= 0.0:
            return None
        bound = math.sin(self._angular_radius / 2) / math.sqrt(cos_product)
        if bound >= 1.0:
            return None
        dlon_deg = math.degrees(2 * math.asin(bound)) * (1 + _SLACK)
        # +1 column: the last column before the antimeridian may be narrower
        span = math.ceil(dlon_deg / self.cell_deg) + 1
        if 2 * span + 1 >= self.n_cols:
            return None
        return span

    def candidates(self, lat: float, lon: float) -> Iterator[int]:
        """Yield keys of every indexed point that may lie within range."""
        row, col = self._row(lat), self._col(lon)
        span = self._column_span(lat)
        for r in (row - 1, row, row + 1):
            cells = self._rows.get(r)
            if not cells:
                continue
            if span is None:
                for keys in cells.values():
                    yield from keys
                continue
            for offset in range(-span, span + 1):
                keys = cells.get((col + offset) % self.n_cols)
                if keys:
                    yield from keys

    def neighbor_pairs(self, distance_fn) -> Iterator[tuple[int, int]]:
        """Yield each pair ``(a, b)`` with ``a < b`` whose distance is in range.

        Args:
            distance_fn: ``(lat1, lon1, lat2, lon2) -> km``.
        """
        for key, (lat, lon) in self._points.items():
            for other in self.candidates(lat, lon):
                if other <= key:
                    continue
                self.stats.candidate_checks += 1
                olat, olon = self._points[other]
                if distance_fn(lat, lon, olat, olon) <= self.max_distance_km:
                    yield key, other
