"""Where tripmatch keeps its SQLite database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "tripmatch"
DEFAULT_DB_FILENAME: Final[str] = "tripmatch.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir.expanduser().resolve() / self.database_filename

    def sqlite_uri(self) -> str:
        """URI of the database file; its directory is created on first use."""
        path = self.database_path
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_home() -> Path:
    if os.name == "nt":
        return Path(os.getenv("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
    return Path(os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share")


def get_storage_config() -> StorageConfig:
    """``TRIPMATCH_DATA_DIR``, else ``tripmatch/`` under the platform data home."""

    override = os.getenv("TRIPMATCH_DATA_DIR")
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins over the SQLite file in the data directory."""

    override = os.getenv("DATABASE_URI")
    if override:
        return DatabaseConfig(uri=override)
    return DatabaseConfig(uri=(storage or get_storage_config()).sqlite_uri())


def get_database_uri() -> str:
    return get_database_config().uri
