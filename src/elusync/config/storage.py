"""Where elusync keeps its SQLite database and HTTP cache on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATA_DIR_ENV: Final[str] = "ELUSYNC_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DEFAULT_DB_FILENAME: Final[str] = "elusync.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


def _xdg_data_home() -> Path:
    configured = os.getenv("XDG_DATA_HOME")
    return Path(configured) if configured else Path.home() / ".local" / "share"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """A data directory holding the database file and the hishel cache file."""

    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _file(self, name: str, *, ensure: bool) -> Path:
        directory = self.resolve_data_dir()
        if ensure:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / name

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._file(DEFAULT_DB_FILENAME, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._file(HTTP_CACHE_FILENAME, ensure=ensure)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    explicit = os.getenv(DATA_DIR_ENV)
    return StorageConfig(data_dir=Path(explicit) if explicit else _xdg_data_home() / "elusync")


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Use ``DATABASE_URI`` when set, else a SQLite file in the data directory."""
    if uri := os.getenv(DATABASE_URI_ENV):
        return DatabaseConfig(uri=uri)
    path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")
