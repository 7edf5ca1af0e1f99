"""Where politrack keeps its files: record store, HTTP cache and job checkpoints."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_DB_FILENAME: Final = "politrack.db"
HTTP_CACHE_FILENAME: Final = "http_cache.db"
CHECKPOINT_DIRNAME: Final = "checkpoints"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Paths under one data directory; directories are created on first use."""

    data_dir: Path

    @property
    def root(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _in_root(self, name: str, *, create: bool) -> Path:
        if create:
            self.root.mkdir(parents=True, exist_ok=True)
        return self.root / name

    def database_path(self, *, create: bool = True) -> Path:
        return self._in_root(DEFAULT_DB_FILENAME, create=create)

    def http_cache_path(self, *, create: bool = True) -> Path:
        return self._in_root(HTTP_CACHE_FILENAME, create=create)

    def checkpoint_dir(self, *, create: bool = True) -> Path:
        path = self.root / CHECKPOINT_DIRNAME
        if create:
            path.mkdir(parents=True, exist_ok=True)
        return path

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def default_data_dir() -> Path:
    """``$XDG_DATA_HOME/politrack``, falling back to ``~/.local/share/politrack``."""

    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "politrack"


def get_storage_config() -> StorageConfig:
    configured = os.getenv("POLITRACK_DATA_DIR")
    return StorageConfig(data_dir=Path(configured) if configured else default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    uri = os.getenv("DATABASE_URI") or (storage or get_storage_config()).database_uri()
    return DatabaseConfig(uri=uri)
