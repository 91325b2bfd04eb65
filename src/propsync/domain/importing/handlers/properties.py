"""Property rows, including the optional catalog sub-entities they may carry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from propsync.domain.date_ranges import DateRange
from propsync.domain.importing.context import ImportMode
from propsync.domain.importing.handlers.base import failed, validate_or_fail
from propsync.domain.importing.report import RowFailed, RowImported, RowUpdated
from propsync.domain.importing.resolve import ResolutionMethod, UnresolvedReference
from propsync.domain.importing.schema import (
    BOOKING_STATUS,
    BOOKING_TYPE,
    COST_TYPE,
    PRICE_TYPE,
    PROPERTY_STATUS,
    REQUEST_URGENCY,
    CommaList,
    Email,
    EnumMapping,
    IsoDate,
    Number,
    RowModel,
    WholeNumber,
    columns,
)
from propsync.domain.importing.validation import InvalidRecord, validate_row
from propsync.domain.model import (
    AvailabilityRequest,
    Booking,
    BookingSource,
    BookingStatus,
    BookingType,
    CostType,
    EntityType,
    OperationalCost,
    PriceRange,
    PriceType,
    Property,
    PropertyStatus,
    RequestUrgency,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from uuid import UUID

    from propsync.domain.importing.handlers.base import RowServices
    from propsync.domain.importing.report import RowOutcome
    from propsync.domain.importing.rows import RawRow


class PropertyRow(RowModel):
    entity_name: ClassVar[str] = "property"
    required_messages: ClassVar[Mapping[str, str]] = {"name": "Property name is required"}
    enum_fields: ClassVar[Mapping[str, EnumMapping[Any]]] = {"status": PROPERTY_STATUS}

    name: str = Field(validation_alias=columns("name", "propertyName"))
    destination: str | None = Field(
        default=None, validation_alias=columns("destination", "destinationName", "destinationId")
    )
    status: PropertyStatus = PROPERTY_STATUS.default
    number_of_rooms: WholeNumber = Field(default=None, validation_alias="numberOfRooms")
    number_of_bathrooms: WholeNumber = Field(default=None, validation_alias="numberOfBathrooms")
    max_guests: WholeNumber = Field(default=None, validation_alias="maxGuests")
    address: str | None = None
    city: str | None = None
    latitude: Number = None
    longitude: Number = None
    segment: str | None = None
    categories: CommaList = Field(default_factory=list[str])

    def attributes(self) -> dict[str, Any]:
        return self.model_dump(exclude={"name", "destination"})


class PriceRangeRow(RowModel):
    entity_name: ClassVar[str] = "pricing"
    markers: ClassVar[tuple[str, ...]] = ("periodName", "priceStartDate", "ownerNightlyRate")
    required_messages: ClassVar[Mapping[str, str]] = {"name": "Price period name is required"}
    date_range: ClassVar[tuple[str, str] | None] = ("start_date", "end_date")

    name: str = Field(validation_alias="periodName")
    start_date: IsoDate = Field(validation_alias="priceStartDate")
    end_date: IsoDate = Field(validation_alias="priceEndDate")
    owner_nightly_rate: Number = Field(default=None, validation_alias="ownerNightlyRate")
    owner_weekly_rate: Number = Field(default=None, validation_alias="ownerWeeklyRate")


class OperationalCostRow(RowModel):
    entity_name: ClassVar[str] = "operational cost"
    markers: ClassVar[tuple[str, ...]] = ("costType", "costEstimatedPrice")
    enum_fields: ClassVar[Mapping[str, EnumMapping[Any]]] = {
        "cost_type": COST_TYPE,
        "price_type": PRICE_TYPE,
    }

    cost_type: CostType = Field(default=COST_TYPE.default, validation_alias="costType")
    estimated_price: Number = Field(default=None, validation_alias="costEstimatedPrice")
    price_type: PriceType = Field(default=PRICE_TYPE.default, validation_alias="costPriceType")


class EmbeddedBookingRow(RowModel):
    entity_name: ClassVar[str] = "booking"
    markers: ClassVar[tuple[str, ...]] = ("bookingType", "bookingStartDate")
    enum_fields: ClassVar[Mapping[str, EnumMapping[Any]]] = {
        "type": BOOKING_TYPE,
        "status": BOOKING_STATUS,
    }
    date_range: ClassVar[tuple[str, str] | None] = ("start_date", "end_date")

    type: BookingType = Field(default=BOOKING_TYPE.default, validation_alias="bookingType")
    status: BookingStatus = Field(default=BOOKING_STATUS.default, validation_alias="bookingStatus")
    start_date: IsoDate = Field(validation_alias="bookingStartDate")
    end_date: IsoDate = Field(validation_alias="bookingEndDate")
    guest_name: str | None = Field(default=None, validation_alias="bookingGuestName")
    guest_email: Email | None = Field(default=None, validation_alias="bookingGuestEmail")
    number_of_guests: WholeNumber = Field(default=None, validation_alias="bookingGuests")
    notes: str | None = Field(default=None, validation_alias="bookingNotes")


class AvailabilityRequestRow(RowModel):
    entity_name: ClassVar[str] = "availability request"
    markers: ClassVar[tuple[str, ...]] = ("requestStartDate", "requestGuestName", "requestGuestEmail")
    required_messages: ClassVar[Mapping[str, str]] = {
        "guest_name": "Guest name is required",
        "guest_email": "Guest email is required",
    }
    enum_fields: ClassVar[Mapping[str, EnumMapping[Any]]] = {"urgency": REQUEST_URGENCY}
    date_range: ClassVar[tuple[str, str] | None] = ("start_date", "end_date")

    start_date: IsoDate = Field(validation_alias="requestStartDate")
    end_date: IsoDate = Field(validation_alias="requestEndDate")
    guest_name: str = Field(validation_alias="requestGuestName")
    guest_email: Email = Field(validation_alias="requestGuestEmail")
    guest_phone: str = Field(default="", validation_alias="requestGuestPhone")
    number_of_guests: WholeNumber = Field(default=1, validation_alias="requestGuests")
    message: str | None = Field(default=None, validation_alias="requestMessage")
    urgency: RequestUrgency = Field(default=REQUEST_URGENCY.default, validation_alias="requestUrgency")


type SubEntityWriter[M: RowModel] = Callable[[M, Property, RowServices, list[str]], Awaitable[None]]


async def _write_price_range(
    price: PriceRangeRow, prop: Property, services: RowServices, warnings: list[str]
) -> None:
    _ = warnings
    created = await services.writer.create(
        PriceRange(
            property_id=prop.id,
            name=price.name,
            start_date=price.start_date,
            end_date=price.end_date,
            owner_nightly_rate=price.owner_nightly_rate,
            owner_weekly_rate=price.owner_weekly_rate,
        )
    )
    services.context.register_price_range(created)


async def _write_operational_cost(
    cost: OperationalCostRow, prop: Property, services: RowServices, warnings: list[str]
) -> None:
    _ = warnings
    await services.writer.create(
        OperationalCost(
            property_id=prop.id,
            cost_type=cost.cost_type,
            estimated_price=cost.estimated_price,
            price_type=cost.price_type,
        )
    )


async def _write_booking(
    booking: EmbeddedBookingRow, prop: Property, services: RowServices, warnings: list[str]
) -> None:
    context = services.context
    candidate = DateRange(booking.start_date, booking.end_date)
    conflicts = context.ranges.find_conflicts(prop.id, candidate)
    if conflicts:
        messages = [f"Date conflict with {conflict.describe()}" for conflict in conflicts]
        if context.mode is not ImportMode.CREATE:
            warnings.append(f"Skipped booking: {'; '.join(messages)}")
            return
        warnings.extend(messages)
    await services.writer.create(
        Booking(
            property_id=prop.id,
            start_date=candidate.start,
            end_date=candidate.end,
            type=booking.type,
            status=booking.status,
            source=BookingSource.IMPORT,
            guest_name=booking.guest_name,
            guest_email=booking.guest_email,
            number_of_guests=booking.number_of_guests,
            notes=booking.notes,
            created_by=context.actor_id,
        )
    )


async def _write_availability_request(
    request: AvailabilityRequestRow, prop: Property, services: RowServices, warnings: list[str]
) -> None:
    _ = warnings
    await services.writer.create(
        AvailabilityRequest(
            property_id=prop.id,
            start_date=request.start_date,
            end_date=request.end_date,
            guest_name=request.guest_name,
            guest_email=request.guest_email,
            guest_phone=request.guest_phone,
            number_of_guests=request.number_of_guests or 1,
            message=request.message,
            urgency=request.urgency,
            requested_by=services.context.actor_id,
        )
    )


@dataclass(frozen=True, slots=True)
class SubEntity[M: RowModel]:
    model: type[M]
    write: SubEntityWriter[M]


SUB_ENTITIES: tuple[SubEntity[Any], ...] = (
    SubEntity(PriceRangeRow, _write_price_range),
    SubEntity(OperationalCostRow, _write_operational_cost),
    SubEntity(EmbeddedBookingRow, _write_booking),
    SubEntity(AvailabilityRequestRow, _write_availability_request),
)


class PropertyRowHandler:
    """Create or update a property by (case-insensitive) name.

    Destinations referenced by name are auto-created. Sub-entity columns are
    optional; invalid sub-entity data is skipped with a warning and does not
    fail the property row.
    """

    entity_type = EntityType.PROPERTY

    async def handle(self, row: RawRow, services: RowServices, warnings: list[str]) -> RowOutcome:
        record = validate_or_fail(row, PropertyRow, warnings)
        if isinstance(record, RowFailed):
            return record
        property_row = record.data
        context = services.context
        name = property_row.name

        destination_id: UUID | None = None
        if property_row.destination:
            resolution = await services.resolver.resolve_destination(property_row.destination)
            if isinstance(resolution, UnresolvedReference):
                return failed(row, warnings, resolution.message)
            destination = resolution.entity
            if resolution.method is ResolutionMethod.AUTO_CREATED:
                warnings.append(
                    f'Auto-created destination: "{destination.name}" ({destination.country})'
                )
            destination_id = destination.id

        created: Property | None = None
        async with services.writer.scope():
            existing = context.properties.find_by_name(name)
            if existing is not None and context.mode is ImportMode.CREATE:
                return failed(row, warnings, f'Property "{name}" already exists')
            if existing is None and context.mode is ImportMode.UPDATE:
                return failed(row, warnings, f'Property "{name}" not found')

            if existing is None:
                created = Property(
                    name=name,
                    destination_id=destination_id,
                    **property_row.attributes(),
                )
                target = await services.writer.create(created)
            else:
                changes = record.changes("name", "destination")
                if destination_id is not None:
                    changes["destination_id"] = destination_id
                target = await services.writer.update(existing, changes)

            await self._write_sub_entities(row, target, services, warnings)

        if created is not None:
            context.properties.add(created)
            return RowImported(row_number=row.row_number, entity_id=created.id, warnings=tuple(warnings))
        return RowUpdated(row_number=row.row_number, entity_id=target.id, warnings=tuple(warnings))

    async def _write_sub_entities(
        self,
        row: RawRow,
        prop: Property,
        services: RowServices,
        warnings: list[str],
    ) -> None:
        for sub_entity in SUB_ENTITIES:
            model = sub_entity.model
            if not model.is_present(row):
                continue
            result = validate_row(row, model)
            warnings.extend(result.warnings)
            if isinstance(result, InvalidRecord):
                warnings.append(f"Skipped {model.entity_name}: {'; '.join(result.messages)}")
                continue
            await sub_entity.write(result.data, prop, services, warnings)


__all__ = [
    "AvailabilityRequestRow",
    "EmbeddedBookingRow",
    "OperationalCostRow",
    "PriceRangeRow",
    "PropertyRow",
    "PropertyRowHandler",
]
