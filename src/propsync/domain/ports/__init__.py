"""Domain ports for persistence and transaction boundaries."""

from __future__ import annotations

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
    Repository,
    RowWriteError,
    StoreUnavailableError,
)
from propsync.domain.ports.unit_of_work import (
    ImportRepositories,
    ImportUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
    UnitOfWorkFactory,
)

__all__ = [
    "AuditLogRepository",
    "AvailabilityRequestRepository",
    "BookingRepository",
    "ContactPropertyLinkRepository",
    "ContactRepository",
    "DestinationRepository",
    "ImportRepositories",
    "ImportUnitOfWork",
    "OperationalCostRepository",
    "PriceRangeRepository",
    "PropertyRepository",
    "Repository",
    "RepositoryCollection",
    "RowWriteError",
    "StoreUnavailableError",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
