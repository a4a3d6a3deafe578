from quake_clusters.models.base import Base
from quake_clusters.models.cluster_definition import ClusterDefinition

__all__ = [
    "Base",
    "ClusterDefinition",
]
