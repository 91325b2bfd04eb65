"""Location of the import database.

``DATABASE_URI`` wins when set; otherwise a SQLite file lives in the
propsync data directory (``PROPSYNC_DATA_DIR`` or the platform default).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "propsync"
DEFAULT_DB_FILENAME: Final[str] = "propsync.db"
DATA_DIR_ENV: Final[str] = "PROPSYNC_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"


class DatabaseSource(StrEnum):
    ENVIRONMENT = "environment"
    DATA_DIR = "data_dir"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Directory that holds the default SQLite database file."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir.expanduser().resolve() / self.database_filename

    def sqlite_uri(self) -> str:
        """Async SQLite URI for ``database_path``; creates the directory on first use."""

        path = self.database_path
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    source: DatabaseSource


def _platform_data_dir() -> Path:
    if os.name == "nt":
        root = os.getenv("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    else:
        root = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(root) / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    configured = os.getenv(DATA_DIR_ENV)
    return StorageConfig(data_dir=Path(configured) if configured else _platform_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    uri = os.getenv(DATABASE_URI_ENV)
    if uri:
        return DatabaseConfig(uri=uri, source=DatabaseSource.ENVIRONMENT)
    return DatabaseConfig(
        uri=(storage or get_storage_config()).sqlite_uri(),
        source=DatabaseSource.DATA_DIR,
    )
