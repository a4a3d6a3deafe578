"""Clustering run configuration with sensible defaults.

All parameters can be overridden via ``config/clustering.yaml``.
If the file does not exist, defaults are used.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

MILLIS_PER_HOUR = 60 * 60 * 1000


class GroupingConfig(BaseModel):
    """Parameters for the spatial cluster finder."""

    # 0 joins only coincident events
    max_distance_km: float = Field(default=100.0, ge=0.0)
    min_members: int = Field(default=3, ge=1)


class SignificanceConfig(BaseModel):
    """Thresholds a cluster must clear before it is persisted."""

    # Unbounded: catalogues report magnitudes at or below zero
    min_significant_magnitude: float = 4.0


class IdentityConfig(BaseModel):
    """Quantization granularity of the stable cluster key."""

    time_bucket_hours: float = Field(default=6.0, gt=0.0)
    geo_bucket_decimal_places: int = Field(default=1, ge=0, le=6)

    @property
    def time_bucket_ms(self) -> int:
        return int(self.time_bucket_hours * MILLIS_PER_HOUR)


class ClusteringConfig(BaseModel):
    """Top-level configuration combining all sub-configs."""

    grouping: GroupingConfig = GroupingConfig()
    significance: SignificanceConfig = SignificanceConfig()
    identity: IdentityConfig = IdentityConfig()


def load_clustering_config(path: Path) -> ClusteringConfig:
    """Load clustering configuration from a YAML file.

    If the file does not exist, returns a ``ClusteringConfig`` with all
    default values.  Partial overrides are supported -- only the keys
    present in the YAML file will override defaults.
    """
    if not path.exists():
        return ClusteringConfig()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return ClusteringConfig(**data)
