"""Alembic environment for the cluster definition catalog.

The worker talks to the database through an async driver, but Alembic
migrates synchronously, so the configured URL is mapped onto the matching
sync driver before an engine is built.
"""

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

# Migrations run from a checkout, not necessarily an installed package
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from quake_clusters.models import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _sync_url(url: str) -> str:
    return url.replace("+asyncpg", "+psycopg2").replace("+aiosqlite", "")


def database_url() -> str:
    """``QUAKE_CLUSTERS_DATABASE_URL`` if set, else ``sqlalchemy.url`` from alembic.ini."""
    url = os.environ.get("QUAKE_CLUSTERS_DATABASE_URL") or config.get_main_option("sqlalchemy.url")
    return _sync_url(url)


def run_migrations_offline() -> None:
    """Emit the catalog DDL as SQL without connecting."""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply pending revisions to the catalog database."""
    connectable = create_engine(database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
