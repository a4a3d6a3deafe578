"""Error taxonomy for a clustering run.

Only ``SourceFetchError`` ends a run.  The others are raised for a single
event or cluster and are caught by the orchestrator, which records them
in the run summary and moves on.
"""

from __future__ import annotations


class ClusterJobError(Exception):
    """Base class for all errors raised inside a clustering run."""


class SourceFetchError(ClusterJobError):
    """The event window could not be fetched; the run aborts."""


class ClusteringError(ClusterJobError):
    """An event cannot take part in distance computation."""

    def __init__(self, message: str, event_id: str | None = None) -> None:
        super().__init__(message)
        self.event_id = event_id


class SummaryComputationError(ClusterJobError):
    """Derived statistics could not be computed for a cluster."""


class PersistenceError(ClusterJobError):
    """Catalog lookup or write failed for one stable key."""

    def __init__(self, message: str, stable_key: str | None = None) -> None:
        super().__init__(message)
        self.stable_key = stable_key
