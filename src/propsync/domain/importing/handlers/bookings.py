"""Booking rows: property lookup, identity by booking id or external id, overlap policy."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar
from uuid import UUID

from pydantic import Field

from propsync.domain.date_ranges import DateRange, booking_range
from propsync.domain.importing.context import ImportMode
from propsync.domain.importing.handlers.base import failed, validate_or_fail
from propsync.domain.importing.report import RowFailed, RowImported, RowUpdated
from propsync.domain.importing.resolve import UnresolvedReference
from propsync.domain.importing.schema import (
    BOOKING_STATUS,
    BOOKING_TYPE,
    Email,
    EnumMapping,
    IsoDate,
    Number,
    RowModel,
    WholeNumber,
    columns,
)
from propsync.domain.model import Booking, BookingSource, BookingStatus, BookingType, EntityType

if TYPE_CHECKING:
    from propsync.domain.importing.context import BatchContext
    from propsync.domain.importing.handlers.base import RowServices
    from propsync.domain.importing.report import RowOutcome
    from propsync.domain.importing.rows import RawRow


class BookingRow(RowModel):
    entity_name: ClassVar[str] = "booking"
    required_messages: ClassVar[Mapping[str, str]] = {
        "property_ref": "Property is required",
        "start_date": "Start date is required",
        "end_date": "End date is required",
    }
    enum_fields: ClassVar[Mapping[str, EnumMapping[Any]]] = {
        "type": BOOKING_TYPE,
        "status": BOOKING_STATUS,
    }
    date_range: ClassVar[tuple[str, str] | None] = ("start_date", "end_date")

    booking_id: str | None = Field(default=None, validation_alias="bookingId")
    external_id: str | None = Field(default=None, validation_alias="externalId")
    property_ref: str = Field(validation_alias=columns("property", "propertyName", "propertyId"))
    start_date: IsoDate = Field(validation_alias="startDate")
    end_date: IsoDate = Field(validation_alias="endDate")
    type: BookingType = Field(
        default=BOOKING_TYPE.default, validation_alias=columns("type", "bookingType")
    )
    status: BookingStatus = BOOKING_STATUS.default
    guest_name: str | None = Field(default=None, validation_alias="guestName")
    guest_email: Email | None = Field(default=None, validation_alias="guestEmail")
    guest_phone: str | None = Field(default=None, validation_alias="guestPhone")
    number_of_guests: WholeNumber = Field(
        default=None, validation_alias=columns("numberOfGuests", "guests")
    )
    total_amount: Number = Field(default=None, validation_alias="totalAmount")
    notes: str | None = None

    @property
    def stay(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


class _InvalidIdentity(ValueError):
    pass


def _booking_id(booking_row: BookingRow) -> UUID | None:
    raw = booking_row.booking_id
    if raw is None:
        return None
    try:
        return UUID(raw)
    except ValueError as exc:
        raise _InvalidIdentity(f'Invalid booking ID "{raw}"') from exc


def _find_existing(
    booking_row: BookingRow, context: BatchContext, booking_id: UUID | None
) -> Booking | None:
    if booking_id is not None:
        return context.bookings_by_id.get(booking_id)
    if booking_row.external_id is not None:
        return context.bookings_by_external_id.get(booking_row.external_id)
    return None


def _reindex(context: BatchContext, booking: Booking, previous_property_id: UUID) -> None:
    context.ranges.discard(previous_property_id, booking.id)
    if booking.id in context.created_booking_ids:
        return
    if booking.is_active and booking.start_date < booking.end_date:
        context.ranges.add(booking.property_id, booking_range(booking), booking.type, owner=booking)


class BookingRowHandler:
    """Create or update bookings against already imported properties.

    Properties are never auto-created here. Overlaps with bookings that
    existed before the batch are warnings in ``create`` mode and row errors
    otherwise; rows of the same batch are not checked against each other.
    Updating a pre-existing booking moves (or, once cancelled, drops) its
    entry in the overlap index so later rows see its new dates.
    """

    entity_type = EntityType.BOOKING

    async def handle(self, row: RawRow, services: RowServices, warnings: list[str]) -> RowOutcome:
        record = validate_or_fail(row, BookingRow, warnings)
        if isinstance(record, RowFailed):
            return record
        booking_row = record.data
        context = services.context

        try:
            booking_id = _booking_id(booking_row)
        except _InvalidIdentity as exc:
            return failed(row, warnings, str(exc))

        resolution = services.resolver.resolve_property(booking_row.property_ref)
        if isinstance(resolution, UnresolvedReference):
            return failed(row, warnings, resolution.message)
        prop = resolution.entity
        candidate = booking_row.stay

        created: Booking | None = None
        moved_from: UUID | None = None
        async with services.writer.scope():
            existing = _find_existing(booking_row, context, booking_id)
            identity = booking_row.booking_id or booking_row.external_id
            if existing is not None and context.mode is ImportMode.CREATE:
                return failed(row, warnings, f'Booking "{identity}" already exists')
            if existing is None and context.mode is ImportMode.UPDATE:
                if identity is None:
                    return failed(
                        row, warnings, "bookingId or externalId is required to update a booking"
                    )
                return failed(row, warnings, f'Booking "{identity}" not found')

            conflicts = context.ranges.find_conflicts(
                prop.id, candidate, exclude=existing.id if existing is not None else None
            )
            if conflicts:
                messages = [f"Date conflict with {conflict.describe()}" for conflict in conflicts]
                if context.mode is not ImportMode.CREATE:
                    return failed(row, warnings, *messages)
                warnings.extend(messages)

            if existing is None:
                created = Booking(
                    property_id=prop.id,
                    start_date=candidate.start,
                    end_date=candidate.end,
                    type=booking_row.type,
                    status=booking_row.status,
                    source=BookingSource.IMPORT,
                    guest_name=booking_row.guest_name,
                    guest_email=booking_row.guest_email,
                    guest_phone=booking_row.guest_phone,
                    number_of_guests=booking_row.number_of_guests,
                    total_amount=booking_row.total_amount,
                    notes=booking_row.notes,
                    external_id=booking_row.external_id,
                    created_by=context.actor_id,
                )
                if booking_id is not None:
                    created.id = booking_id
                target = await services.writer.create(created)
            else:
                moved_from = existing.property_id
                changes = record.changes("booking_id", "property_ref")
                changes["property_id"] = prop.id
                changes["updated_by"] = context.actor_id
                target = await services.writer.update(existing, changes)

        if created is not None:
            context.register_booking(created, created=True)
            return RowImported(row_number=row.row_number, entity_id=target.id, warnings=tuple(warnings))
        if moved_from is not None:
            _reindex(context, target, moved_from)
        return RowUpdated(row_number=row.row_number, entity_id=target.id, warnings=tuple(warnings))


__all__ = ["BookingRow", "BookingRowHandler"]
