"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractAsyncContextManager
    from types import TracebackType

    from propsync.domain.ports.persistence import (
        AuditLogRepository,
        AvailabilityRequestRepository,
        BookingRepository,
        ContactPropertyLinkRepository,
        ContactRepository,
        DestinationRepository,
        OperationalCostRepository,
        PriceRangeRepository,
        PropertyRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Async transaction boundary around a repository collection.

    Leaving the context without ``commit()`` rolls back. ``row_scope()``
    opens a nested scope (savepoint) whose writes are discarded when the
    block raises, without touching the outer transaction. Row scopes are
    serialized; callers may open them from concurrent tasks.
    """

    @property
    def repositories(self) -> TRepositories: ...

    async def __aenter__(self) -> UnitOfWork[TRepositories]: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    def row_scope(self) -> AbstractAsyncContextManager[None]: ...


@dataclass(slots=True)
class ImportRepositories(RepositoryCollection):
    """Repositories required by bulk imports and booking mutations."""

    destinations: DestinationRepository
    properties: PropertyRepository
    price_ranges: PriceRangeRepository
    operational_costs: OperationalCostRepository
    bookings: BookingRepository
    availability_requests: AvailabilityRequestRepository
    contacts: ContactRepository
    contact_links: ContactPropertyLinkRepository
    audit_log: AuditLogRepository


type ImportUnitOfWork = UnitOfWork[ImportRepositories]
type UnitOfWorkFactory = Callable[[], ImportUnitOfWork]
