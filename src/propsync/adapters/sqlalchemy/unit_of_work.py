"""Async SQLAlchemy unit of work with savepoint-per-row scopes."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import event, inspect
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from propsync.adapters.sqlalchemy.mappings import start_mappers
from propsync.adapters.sqlalchemy.migrations import upgrade_head
from propsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyAvailabilityRequestRepository,
    SqlAlchemyBookingRepository,
    SqlAlchemyContactPropertyLinkRepository,
    SqlAlchemyContactRepository,
    SqlAlchemyDestinationRepository,
    SqlAlchemyOperationalCostRepository,
    SqlAlchemyPriceRangeRepository,
    SqlAlchemyPropertyRepository,
)
from propsync.config import get_database_config
from propsync.domain.ports import ImportRepositories, RowWriteError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSessionTransaction


log = getLogger(__name__)

_UNAVAILABLE = (OperationalError, InterfaceError)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @engine.setter
    def engine(self, value: AsyncEngine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call propsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def configure_sqlite(engine: AsyncEngine) -> None:
    """Enforce foreign keys and let SQLAlchemy emit BEGIN so SAVEPOINTs work."""

    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:  # pyright: ignore[reportUnusedFunction]
        _ = connection_record
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sync_engine, "begin")
    def _on_begin(connection: Any) -> None:  # pyright: ignore[reportUnusedFunction]
        connection.exec_driver_sql("BEGIN")


def build_engine(database_uri: str, **engine_options: Any) -> AsyncEngine:
    engine = create_async_engine(database_uri, **engine_options)
    if engine.dialect.name == "sqlite":
        configure_sqlite(engine)
    return engine


async def startup(
    *,
    engine: AsyncEngine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the async engine, mappers, schema and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if _STATE.engine is not None:
        await shutdown()

    resolved_engine = engine or build_engine(database_uri or get_database_config().uri)
    start_mappers()
    await upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine
    log.info("SQLAlchemy adapter started: %s", resolved_engine.url.render_as_string())


def configured_engine() -> AsyncEngine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


async def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        await _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyUnitOfWork:
    """One async session and one outer transaction per ``async with`` block.

    ``row_scope()`` serializes callers on a lock and wraps each in a
    SAVEPOINT: constraint violations roll back only that scope and surface as
    ``RowWriteError``; connection failures surface as
    ``StoreUnavailableError`` and leave the outer transaction to be rolled
    back by the caller.
    """

    def __init__(self) -> None:
        self.session_factory: async_sessionmaker[AsyncSession] = _STATE.session_factory
        self._session: AsyncSession | None = None
        self._repositories: ImportRepositories | None = None
        self._row_lock = asyncio.Lock()

    def _build_repositories(self, session: AsyncSession) -> ImportRepositories:
        return ImportRepositories(
            destinations=SqlAlchemyDestinationRepository(session),
            properties=SqlAlchemyPropertyRepository(session),
            price_ranges=SqlAlchemyPriceRangeRepository(session),
            operational_costs=SqlAlchemyOperationalCostRepository(session),
            bookings=SqlAlchemyBookingRepository(session),
            availability_requests=SqlAlchemyAvailabilityRequestRepository(session),
            contacts=SqlAlchemyContactRepository(session),
            contact_links=SqlAlchemyContactPropertyLinkRepository(session),
            audit_log=SqlAlchemyAuditLogRepository(session),
        )

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self.session_factory()
        self._repositories = self._build_repositories(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            await self._safe_rollback()
        finally:
            await session.close()
            self._session = None
            self._repositories = None
        if isinstance(exc_value, _UNAVAILABLE):
            raise StoreUnavailableError(_describe(exc_value)) from exc_value
        return False

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except _UNAVAILABLE as exc:
            raise StoreUnavailableError(_describe(exc)) from exc

    async def rollback(self) -> None:
        await self.session.rollback()

    @asynccontextmanager
    async def row_scope(self) -> AsyncIterator[None]:
        async with self._row_lock:
            session = self.session
            savepoint = await session.begin_nested()
            try:
                yield
                await savepoint.commit()
            except _UNAVAILABLE as exc:
                raise StoreUnavailableError(_describe(exc)) from exc
            except IntegrityError as exc:
                await self._rollback_savepoint(savepoint)
                raise RowWriteError(_describe(exc)) from exc
            except BaseException:
                await self._rollback_savepoint(savepoint)
                raise

    async def _rollback_savepoint(self, savepoint: AsyncSessionTransaction) -> None:
        session = self.session
        await savepoint.rollback()
        # objects changed inside the savepoint were expired by the rollback;
        # reload them now, lazy loads are not available on an AsyncSession
        expired = [obj for obj in session.identity_map.values() if inspect(obj).expired_attributes]
        for obj in expired:
            await session.refresh(obj)

    async def _safe_rollback(self) -> None:
        """Roll back whatever is uncommitted; a broken connection is only logged."""

        try:
            await self.session.rollback()
        except SQLAlchemyError:
            log.warning("Rollback failed while closing unit of work", exc_info=True)

    @property
    def repositories(self) -> ImportRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session


def _describe(exc: SQLAlchemyError) -> str:
    original = getattr(exc, "orig", None)
    return str(original) if original is not None else str(exc)


if TYPE_CHECKING:
    from propsync.domain.ports import ImportUnitOfWork

    _uow_check: ImportUnitOfWork = SqlAlchemyUnitOfWork()
