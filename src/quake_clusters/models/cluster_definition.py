"""Cluster definition model -- the persisted, versioned view of a cluster."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from quake_clusters.models.base import Base


class ClusterDefinition(Base):
    """Current known state of a significant cluster.

    One row per ``stable_key``.  ``slug``, ``stable_key`` and
    ``created_at`` never change after insert; every later observation of
    the same key overwrites the derived fields and bumps ``version`` by 1.
    """

    __tablename__ = "cluster_definitions"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True)
    stable_key: Mapped[str] = mapped_column(sa.String, unique=True)
    slug: Mapped[str] = mapped_column(sa.String, unique=True)

    # Membership
    strongest_event_id: Mapped[str] = mapped_column(sa.String, index=True)
    event_ids: Mapped[list] = mapped_column(sa.JSON)
    event_count: Mapped[int] = mapped_column(sa.Integer)

    # Presentation
    title: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    description: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    location_name: Mapped[str | None] = mapped_column(sa.String, nullable=True)

    # Magnitude stats
    max_magnitude: Mapped[float] = mapped_column(sa.Float)
    min_magnitude: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    mean_magnitude: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    significance_score: Mapped[float | None] = mapped_column(sa.Float, nullable=True, index=True)

    # Geometry (anchor = strongest event, not a true centroid)
    anchor_lat: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    anchor_lon: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    radius_km: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    depth_range: Mapped[str | None] = mapped_column(sa.String, nullable=True)

    # Time bounds (epoch milliseconds)
    start_time_ms: Mapped[int] = mapped_column(sa.BigInteger, index=True)
    end_time_ms: Mapped[int] = mapped_column(sa.BigInteger, index=True)
    duration_hours: Mapped[float | None] = mapped_column(sa.Float, nullable=True)

    version: Mapped[int] = mapped_column(sa.Integer, default=1)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"), index=True
    )
