"""Bulk import defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import optional_int_env
from .errors import ConfigurationError

DEFAULT_IMPORT_CHUNK_SIZE = 10
DEFAULT_ACTOR_ID = "system"


@dataclass(frozen=True, slots=True)
class ImportConfig:
    chunk_size: int = DEFAULT_IMPORT_CHUNK_SIZE
    actor_id: str = DEFAULT_ACTOR_ID

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ConfigurationError("Import chunk size must be at least 1")


def get_import_config() -> ImportConfig:
    chunk_size = optional_int_env("PROPSYNC_IMPORT_CHUNK_SIZE", DEFAULT_IMPORT_CHUNK_SIZE)
    actor_id = os.getenv("PROPSYNC_ACTOR_ID") or DEFAULT_ACTOR_ID
    return ImportConfig(chunk_size=chunk_size, actor_id=actor_id)
