from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.pool import NullPool

from propsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    build_engine,
    shutdown,
    startup,
)
from tests.helpers.memory_store import MemoryStore

os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Iterator[AsyncEngine]:
    # NullPool: each test drives several event loops via asyncio.run
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'propsync.db'}", poolclass=NullPool)
    asyncio.run(startup(engine=engine, force=True))
    try:
        yield engine
    finally:
        asyncio.run(shutdown())


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: AsyncEngine,
) -> Callable[[], SqlAlchemyUnitOfWork]:
    _ = sqlite_engine

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    return factory
