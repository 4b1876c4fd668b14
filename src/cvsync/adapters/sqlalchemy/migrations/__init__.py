"""Alembic migrations of the term store schema."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from cvsync.config.storage import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
PYPROJECT_PATH: Final[Path] = MIGRATIONS_PATH.parents[4] / "pyproject.toml"

log = getLogger(__name__)


def alembic_config(*, database_uri: str | None = None) -> Config:
    """Alembic ``Config`` pointing at the migrations shipped with the package.

    ``[tool.alembic]`` of a source checkout is read for extra options, but
    ``script_location`` always resolves here so installed copies work from
    any working directory.
    """

    config = Config(toml_file=str(PYPROJECT_PATH)) if PYPROJECT_PATH.exists() else Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema to the latest revision."""

    if engine is None:
        command.upgrade(alembic_config(database_uri=database_uri or get_database_uri()), "head")
        return

    config = alembic_config()
    with engine.begin() as connection:
        before = MigrationContext.configure(connection).get_current_revision()
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
        after = MigrationContext.configure(connection).get_current_revision()
    if before != after:
        log.info("Upgraded term store schema from %s to %s", before or "empty", after)


def current_revision(engine: Engine) -> str | None:
    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()
