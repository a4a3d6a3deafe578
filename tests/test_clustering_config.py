"""Tests for clustering configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from quake_clusters.clustering.config import (
    ClusteringConfig,
    GroupingConfig,
    IdentityConfig,
    SignificanceConfig,
    load_clustering_config,
)

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config" / "clustering.yaml"


class TestDefaults:
    def test_default_values(self):
        config = ClusteringConfig()
        assert config.grouping.max_distance_km == 100.0
        assert config.grouping.min_members == 3
        assert config.significance.min_significant_magnitude == 4.0
        assert config.identity.time_bucket_hours == 6.0
        assert config.identity.geo_bucket_decimal_places == 1

    def test_time_bucket_ms(self):
        assert IdentityConfig().time_bucket_ms == 21_600_000


class TestLoadClusteringConfig:
    def test_missing_file_returns_defaults(self, tmp_path: Path):
        assert load_clustering_config(tmp_path / "nope.yaml") == ClusteringConfig()

    def test_repo_config_loads(self):
        config = load_clustering_config(REPO_CONFIG)
        assert config.grouping.max_distance_km == 100.0

    def test_partial_override(self, tmp_path: Path):
        path = tmp_path / "clustering.yaml"
        path.write_text("grouping:\n  max_distance_km: 25\n", encoding="utf-8")
        config = load_clustering_config(path)
        assert config.grouping.max_distance_km == 25.0
        assert config.grouping.min_members == 3
        assert config.significance.min_significant_magnitude == 4.0

    def test_empty_file_returns_defaults(self, tmp_path: Path):
        path = tmp_path / "clustering.yaml"
        path.write_text("", encoding="utf-8")
        assert load_clustering_config(path) == ClusteringConfig()


class TestValidation:
    def test_negative_distance_rejected(self):
        with pytest.raises(ValidationError):
            GroupingConfig(max_distance_km=-1)

    def test_zero_min_members_rejected(self):
        with pytest.raises(ValidationError):
            GroupingConfig(min_members=0)

    def test_zero_time_bucket_rejected(self):
        with pytest.raises(ValidationError):
            IdentityConfig(time_bucket_hours=0)

    def test_zero_distance_allowed(self):
        assert GroupingConfig(max_distance_km=0).max_distance_km == 0.0

    def test_negative_magnitude_threshold_allowed(self):
        """Small events are reported with magnitudes at or below zero."""
        assert SignificanceConfig(min_significant_magnitude=-0.5).min_significant_magnitude == -0.5

    def test_too_many_decimal_places_rejected(self):
        with pytest.raises(ValidationError):
            IdentityConfig(geo_bucket_decimal_places=7)
