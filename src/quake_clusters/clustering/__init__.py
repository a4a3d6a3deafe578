"""Spatial clustering of seismic events.

Groups events into connected components under a great-circle distance
threshold (via a spatial grid index and networkx), and derives per-cluster
statistics.
"""

from .spatial_cluster import ClusterResult, find_clusters
from .summary import ClusterSummary, summarize_cluster
from .types import Cluster, Event

__all__ = [
    "Cluster",
    "ClusterResult",
    "ClusterSummary",
    "Event",
    "find_clusters",
    "summarize_cluster",
]
