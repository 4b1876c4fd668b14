"""Where cvsync keeps its term database and the OLS response cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_flag

APP_DIR_NAME: Final[str] = "cvsync"
DEFAULT_DB_FILENAME: Final[str] = "cvsync.db"
HTTP_CACHE_FILENAME: Final[str] = "ols_cache.db"


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Data directory holding the default sqlite term store and the HTTP cache."""

    data_dir: Path

    @classmethod
    def from_env(cls) -> StorageConfig:
        override = os.getenv("CVSYNC_DATA_DIR")
        return cls(data_dir=Path(override) if override else _platform_data_home() / APP_DIR_NAME)

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _file(self, filename: str, *, ensure: bool) -> Path:
        directory = self.resolve_data_dir()
        if ensure:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / filename

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._file(DEFAULT_DB_FILENAME, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._file(HTTP_CACHE_FILENAME, ensure=ensure)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings of the local term store.

    ``DATABASE_URI`` points at an existing database (usually the curated
    production one); without it a sqlite file in the data directory is used.
    """

    uri: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.uri.startswith("sqlite")


def get_storage_config() -> StorageConfig:
    return StorageConfig.from_env()


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    echo = env_flag("CVSYNC_SQL_ECHO")
    uri = os.getenv("DATABASE_URI")
    if not uri:
        uri = f"sqlite+pysqlite:///{(storage or get_storage_config()).database_path()}"
    return DatabaseConfig(uri=uri, echo=echo)


def get_database_uri() -> str:
    return get_database_config().uri
