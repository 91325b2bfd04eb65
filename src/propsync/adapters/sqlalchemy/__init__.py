"""SQLAlchemy adapter package for propsync."""

from __future__ import annotations

from .mappings import TABLE_BY_CLASS, create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyAvailabilityRequestRepository,
    SqlAlchemyBookingRepository,
    SqlAlchemyContactPropertyLinkRepository,
    SqlAlchemyContactRepository,
    SqlAlchemyDestinationRepository,
    SqlAlchemyOperationalCostRepository,
    SqlAlchemyPriceRangeRepository,
    SqlAlchemyPropertyRepository,
    SqlAlchemyRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "TABLE_BY_CLASS",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyAvailabilityRequestRepository",
    "SqlAlchemyBookingRepository",
    "SqlAlchemyContactPropertyLinkRepository",
    "SqlAlchemyContactRepository",
    "SqlAlchemyDestinationRepository",
    "SqlAlchemyOperationalCostRepository",
    "SqlAlchemyPriceRangeRepository",
    "SqlAlchemyPropertyRepository",
    "SqlAlchemyRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "startup",
]
