"""Create cluster_definitions table.

Revision ID: 001_cluster_definitions
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

revision = "001_cluster_definitions"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "cluster_definitions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("stable_key", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("strongest_event_id", sa.String(), nullable=False),
        sa.Column("event_ids", sa.JSON(), nullable=False),
        sa.Column("event_count", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location_name", sa.String(), nullable=True),
        sa.Column("max_magnitude", sa.Float(), nullable=False),
        sa.Column("min_magnitude", sa.Float(), nullable=True),
        sa.Column("mean_magnitude", sa.Float(), nullable=True),
        sa.Column("significance_score", sa.Float(), nullable=True),
        sa.Column("anchor_lat", sa.Float(), nullable=True),
        sa.Column("anchor_lon", sa.Float(), nullable=True),
        sa.Column("radius_km", sa.Float(), nullable=True),
        sa.Column("depth_range", sa.String(), nullable=True),
        sa.Column("start_time_ms", sa.BigInteger(), nullable=False),
        sa.Column("end_time_ms", sa.BigInteger(), nullable=False),
        sa.Column("duration_hours", sa.Float(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("stable_key", name="uq_cluster_definitions_stable_key"),
        sa.UniqueConstraint("slug", name="uq_cluster_definitions_slug"),
    )
    op.create_index(
        "ix_cluster_definitions_strongest_event_id", "cluster_definitions", ["strongest_event_id"]
    )
    op.create_index(
        "ix_cluster_definitions_significance_score", "cluster_definitions", ["significance_score"]
    )
    op.create_index("ix_cluster_definitions_start_time_ms", "cluster_definitions", ["start_time_ms"])
    op.create_index("ix_cluster_definitions_end_time_ms", "cluster_definitions", ["end_time_ms"])
    op.create_index("ix_cluster_definitions_updated_at", "cluster_definitions", ["updated_at"])


def downgrade() -> None:
    op.drop_index("ix_cluster_definitions_updated_at")
    op.drop_index("ix_cluster_definitions_end_time_ms")
    op.drop_index("ix_cluster_definitions_start_time_ms")
    op.drop_index("ix_cluster_definitions_significance_score")
    op.drop_index("ix_cluster_definitions_strongest_event_id")
    op.drop_table("cluster_definitions")
