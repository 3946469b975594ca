# alembic/env.py
from __future__ import annotations

import os, sys
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine, pool

# --- Make the tvcatalog package importable and load .env ---
ALEMBIC_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(ALEMBIC_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# shell env vars win over .env
load_dotenv(override=False)

from tvcatalog.core.settings import settings  # noqa: E402
from tvcatalog.db_models import Base          # noqa: E402

target_metadata = Base.metadata
config = context.config


def _to_sync_psycopg(url: str) -> str:
    """Alembic runs synchronously: rewrite any postgres URL to psycopg v3."""
    u = (url or "").strip().strip('"').strip("'")
    if not u:
        return u
    if u.startswith("postgres://"):
        u = "postgresql://" + u[len("postgres://"):]
    for prefix in ("postgresql+asyncpg://", "postgresql+psycopg2://", "postgresql://"):
        if u.startswith(prefix):
            return "postgresql+psycopg://" + u[len(prefix):]
    return u


def _choose_sync_url() -> str:
    """
    DATABASE_URL_SYNC if set, otherwise DATABASE_URL (converted).
    """
    for candidate in (settings.database_url_sync, settings.database_url):
        if candidate:
            return _to_sync_psycopg(candidate)
    return ""


url_sync = _choose_sync_url()
if not url_sync:
    raise RuntimeError("No DB URL found for Alembic. Set DATABASE_URL_SYNC or DATABASE_URL.")

config.set_main_option("sqlalchemy.url", url_sync)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(
        config.get_main_option("sqlalchemy.url"),
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
