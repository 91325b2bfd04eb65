"""Ports for persisting domain entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from propsync.domain.model import (
    AuditLogEntry,
    AvailabilityRequest,
    Booking,
    Contact,
    ContactPropertyLink,
    Destination,
    OperationalCost,
    PriceRange,
    Property,
)

if TYPE_CHECKING:
    from uuid import UUID


class StoreUnavailableError(RuntimeError):
    """Raised when the backing store cannot be reached or the connection broke.

    Aborts the surrounding batch; never recorded as a row diagnostic.
    """


class RowWriteError(RuntimeError):
    """Raised when the store rejects a single row's writes (constraint violation)."""


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal async repository contract for one entity kind."""

    async def add(self, entity: TEntity) -> None: ...

    async def get(self, entity_id: UUID) -> TEntity | None: ...

    async def list_all(self) -> list[TEntity]: ...

    async def save(self, entity: TEntity) -> None:
        """Persist in-place modifications of an already added entity."""
        ...

    async def delete(self, entity: TEntity) -> None: ...


@runtime_checkable
class DestinationRepository(Repository[Destination], Protocol):
    """Repository contract for destinations."""


@runtime_checkable
class PropertyRepository(Repository[Property], Protocol):
    """Repository contract for properties."""


@runtime_checkable
class PriceRangeRepository(Repository[PriceRange], Protocol):
    """Repository contract for property price ranges."""


@runtime_checkable
class OperationalCostRepository(Repository[OperationalCost], Protocol):
    """Repository contract for property operational costs."""


@runtime_checkable
class BookingRepository(Repository[Booking], Protocol):
    """Repository contract for bookings."""

    async def list_active(self, *, property_id: UUID | None = None) -> list[Booking]:
        """Return non-cancelled bookings, optionally for one property."""
        ...

    async def get_by_external_id(self, external_id: str) -> Booking | None: ...


@runtime_checkable
class AvailabilityRequestRepository(Repository[AvailabilityRequest], Protocol):
    """Repository contract for availability requests."""


@runtime_checkable
class ContactRepository(Repository[Contact], Protocol):
    """Repository contract for contacts."""

    async def get_by_email(self, email: str) -> Contact | None: ...


@runtime_checkable
class ContactPropertyLinkRepository(Repository[ContactPropertyLink], Protocol):
    """Repository contract for contact-property links."""

    async def list_for_contact(self, contact_id: UUID) -> list[ContactPropertyLink]: ...


@runtime_checkable
class AuditLogRepository(Protocol):
    """Write-mostly sink for audit entries."""

    async def add(self, entry: AuditLogEntry) -> None: ...

    async def list_all(self) -> list[AuditLogEntry]: ...
