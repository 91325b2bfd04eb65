"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_int_env
from .errors import ConfigurationError
from .importing import ImportConfig, get_import_config
from .logging import configure_logging, resolve_log_level
from .storage import (
    DatabaseConfig,
    DatabaseSource,
    StorageConfig,
    get_database_config,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "DatabaseSource",
    "ImportConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_import_config",
    "get_storage_config",
    "optional_int_env",
    "resolve_log_level",
]
