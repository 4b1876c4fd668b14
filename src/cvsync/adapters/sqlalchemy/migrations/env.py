"""Alembic environment for the cvsync term schema.

``upgrade_head`` hands over an open connection through
``config.attributes["connection"]``; the ``alembic`` command line builds its
own engine from ``sqlalchemy.url`` or ``DATABASE_URI``.
"""

from __future__ import annotations

from logging import getLogger
from logging.config import fileConfig
from pathlib import Path
from typing import TYPE_CHECKING, Any

from alembic import context
from sqlalchemy import create_engine, pool

from cvsync.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from cvsync.config import configure_logging, get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config
log = getLogger("alembic.env")

if config.config_file_name is not None and Path(config.config_file_name).suffix == ".ini":
    fileConfig(config.config_file_name)
elif "connection" not in config.attributes:
    configure_logging()

start_mappers()
target_metadata = mapper_registry.metadata

# sqlite needs batch mode for ALTER TABLE; the type checks keep autogenerate honest.
_OPTIONS: dict[str, Any] = {
    "target_metadata": target_metadata,
    "render_as_batch": True,
    "compare_type": True,
    "compare_server_default": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit the migration SQL without a database connection."""

    context.configure(url=_database_url(), literal_binds=True, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    shared: Connection | None = config.attributes.get("connection")
    if shared is not None:
        _migrate(shared)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    log.info("Migrating %s", engine.url.render_as_string(hide_password=True))
    try:
        with engine.connect() as connection:
            _migrate(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
