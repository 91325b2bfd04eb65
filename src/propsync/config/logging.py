"""Logging setup for the import CLI.

Diagnostics go to stderr so the JSON report on stdout stays machine readable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Final

from .errors import ConfigurationError

LOG_LEVEL_ENV: Final[str] = "PROPSYNC_LOG_LEVEL"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# driver chatter that drowns out per-row diagnostics at DEBUG
NOISY_LOGGERS: Final[tuple[str, ...]] = ("aiosqlite", "sqlalchemy.engine", "alembic")


def resolve_log_level(level: int | str | None = None) -> int:
    """Return a numeric level from ``level`` or ``PROPSYNC_LOG_LEVEL`` (default INFO)."""

    if isinstance(level, int):
        return level
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
    resolved = logging.getLevelNamesMapping().get(name)
    if resolved is None:
        raise ConfigurationError(f"Unknown log level {name!r}")
    return resolved


def configure_logging(*, level: int | str | None = None, force: bool = False) -> int:
    """Configure the root logger on stderr and return the effective level.

    Third-party loggers in ``NOISY_LOGGERS`` stay at WARNING unless the root
    level is stricter.
    """

    resolved = resolve_log_level(level)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    return resolved
