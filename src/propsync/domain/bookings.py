"""Direct booking mutations with hard rejection of date conflicts."""

from __future__ import annotations

from dataclasses import fields
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.domain.date_ranges import DateRange, RangeIndex
from propsync.domain.importing.writer import EntityWriter
from propsync.domain.model import Booking, BookingSource, BookingStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date
    from uuid import UUID

    from propsync.domain.date_ranges import ConflictRecord
    from propsync.domain.ports import ImportRepositories, UnitOfWorkFactory


log = getLogger(__name__)

_IMMUTABLE = frozenset({"id", "source", "created_by", "created_at"})
_MUTABLE = frozenset(item.name for item in fields(Booking)) - _IMMUTABLE


class EntityNotFoundError(LookupError):
    """Raised when a referenced entity does not exist."""


class BookingConflictError(RuntimeError):
    """Raised when a booking would overlap an active booking of the same property."""

    def __init__(self, conflicts: list[ConflictRecord]) -> None:
        self.conflicts = conflicts
        details = "; ".join(conflict.describe() for conflict in conflicts)
        super().__init__(f"Booking conflicts with {len(conflicts)} existing booking(s): {details}")


async def _conflicts(
    repositories: ImportRepositories,
    property_id: UUID,
    candidate: DateRange,
    *,
    exclude: UUID | None = None,
) -> list[ConflictRecord]:
    active = await repositories.bookings.list_active(property_id=property_id)
    return RangeIndex.from_bookings(active).find_conflicts(property_id, candidate, exclude=exclude)


async def check_availability(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    property_id: UUID,
    start_date: date,
    end_date: date,
    exclude_booking_id: UUID | None = None,
) -> list[ConflictRecord]:
    """Return the active bookings that overlap ``[start_date, end_date)``.

    An empty list means the property is available.
    """

    candidate = DateRange(start_date, end_date)
    async with unit_of_work_factory() as uow:
        return await _conflicts(
            uow.repositories, property_id, candidate, exclude=exclude_booking_id
        )


async def create_booking(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    actor_id: str,
    property_id: UUID,
    start_date: date,
    end_date: date,
    **attributes: object,
) -> Booking:
    candidate = DateRange(start_date, end_date)
    async with unit_of_work_factory() as uow:
        repositories = uow.repositories
        if await repositories.properties.get(property_id) is None:
            raise EntityNotFoundError(f"Property {property_id} not found")
        conflicts = await _conflicts(repositories, property_id, candidate)
        if conflicts:
            raise BookingConflictError(conflicts)

        booking = Booking(
            property_id=property_id,
            start_date=start_date,
            end_date=end_date,
            source=BookingSource.MANUAL,
            created_by=actor_id,
            **attributes,  # pyright: ignore[reportArgumentType]
        )
        await EntityWriter(uow, actor_id=actor_id).create(booking)
        await uow.commit()
    log.info("Created booking %s for property %s", booking.id, property_id)
    return booking


async def update_booking(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    actor_id: str,
    booking_id: UUID,
    changes: Mapping[str, object],
) -> Booking:
    """Apply ``changes``; the overlap check ignores the booking being updated.

    Cancelling a booking never conflicts.
    """

    unknown = set(changes) - _MUTABLE
    if unknown:
        raise ValueError(f"Cannot update booking fields: {', '.join(sorted(unknown))}")

    async with unit_of_work_factory() as uow:
        repositories = uow.repositories
        booking = await repositories.bookings.get(booking_id)
        if booking is None:
            raise EntityNotFoundError(f"Booking {booking_id} not found")

        property_id: UUID = changes.get("property_id", booking.property_id)  # type: ignore[assignment]
        if property_id != booking.property_id and await repositories.properties.get(property_id) is None:
            raise EntityNotFoundError(f"Property {property_id} not found")
        candidate = DateRange(
            changes.get("start_date", booking.start_date),  # type: ignore[arg-type]
            changes.get("end_date", booking.end_date),  # type: ignore[arg-type]
        )
        status = changes.get("status", booking.status)
        conflicts = (
            []
            if status is BookingStatus.CANCELLED
            else await _conflicts(repositories, property_id, candidate, exclude=booking.id)
        )
        if conflicts:
            raise BookingConflictError(conflicts)

        await EntityWriter(uow, actor_id=actor_id).update(
            booking, {**changes, "updated_by": actor_id}
        )
        await uow.commit()
    return booking


async def delete_booking(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    actor_id: str,
    booking_id: UUID,
) -> None:
    async with unit_of_work_factory() as uow:
        booking = await uow.repositories.bookings.get(booking_id)
        if booking is None:
            raise EntityNotFoundError(f"Booking {booking_id} not found")
        await EntityWriter(uow, actor_id=actor_id).delete(booking)
        await uow.commit()
    log.info("Deleted booking %s", booking_id)


__all__ = [
    "BookingConflictError",
    "EntityNotFoundError",
    "check_availability",
    "create_booking",
    "delete_booking",
    "update_booking",
]
