"""Standalone price range rows, checked for overlaps with a property's stored periods."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from propsync.domain.date_ranges import DateRange, overlaps
from propsync.domain.importing.context import ImportMode
from propsync.domain.importing.handlers.base import failed, validate_or_fail
from propsync.domain.importing.report import RowFailed, RowImported, RowSkipped, RowUpdated
from propsync.domain.importing.resolve import UnresolvedReference
from propsync.domain.importing.schema import IsoDate, Number, RowModel, columns
from propsync.domain.model import EntityType, PriceRange

if TYPE_CHECKING:
    from uuid import UUID

    from propsync.domain.importing.context import BatchContext
    from propsync.domain.importing.handlers.base import RowServices
    from propsync.domain.importing.report import RowOutcome
    from propsync.domain.importing.rows import RawRow


class PriceRangeImportRow(RowModel):
    entity_name: ClassVar[str] = "price range"
    required_messages: ClassVar[Mapping[str, str]] = {
        "property_ref": "Property is required",
        "name": "Price period name is required",
        "start_date": "Start date is required",
        "end_date": "End date is required",
    }
    date_range: ClassVar[tuple[str, str] | None] = ("start_date", "end_date")

    property_ref: str = Field(validation_alias=columns("property", "propertyName", "propertyId"))
    name: str = Field(validation_alias=columns("periodName", "name"))
    start_date: IsoDate = Field(validation_alias=columns("startDate", "priceStartDate"))
    end_date: IsoDate = Field(validation_alias=columns("endDate", "priceEndDate"))
    owner_nightly_rate: Number = Field(
        default=None, validation_alias=columns("ownerNightlyRate", "nightlyRate")
    )
    owner_weekly_rate: Number = Field(
        default=None, validation_alias=columns("ownerWeeklyRate", "weeklyRate")
    )


def _overlapping(context: BatchContext, property_id: UUID, candidate: DateRange) -> list[PriceRange]:
    return [
        stored
        for stored in context.price_ranges.get(property_id, [])
        if stored.start_date < stored.end_date
        and overlaps(candidate, DateRange(stored.start_date, stored.end_date))
    ]


def _describe(price_range: PriceRange) -> str:
    return (
        f'price range "{price_range.name}" from {price_range.start_date.isoformat()} '
        f"to {price_range.end_date.isoformat()}"
    )


class PriceRangeRowHandler:
    """Create price periods for existing properties.

    A period that overlaps a stored one (or one created earlier in the batch)
    is a row error unless ``skip_conflicts`` skips it with a warning or
    ``update_existing`` rewrites the first overlapping period in place.
    ``update`` and ``both`` modes imply ``update_existing``; ``update`` mode
    additionally fails rows that overlap nothing.
    """

    entity_type = EntityType.PRICE_RANGE

    def __init__(self, *, skip_conflicts: bool = False, update_existing: bool = False) -> None:
        self.skip_conflicts = skip_conflicts
        self.update_existing = update_existing

    async def handle(self, row: RawRow, services: RowServices, warnings: list[str]) -> RowOutcome:
        record = validate_or_fail(row, PriceRangeImportRow, warnings)
        if isinstance(record, RowFailed):
            return record
        price = record.data
        context = services.context

        resolution = services.resolver.resolve_property(price.property_ref)
        if isinstance(resolution, UnresolvedReference):
            return failed(row, warnings, resolution.message)
        prop = resolution.entity
        candidate = DateRange(price.start_date, price.end_date)

        created: PriceRange | None = None
        async with services.writer.scope():
            conflicts = _overlapping(context, prop.id, candidate)
            if not conflicts:
                if context.mode is ImportMode.UPDATE:
                    return failed(
                        row,
                        warnings,
                        f'No price range of "{prop.name}" overlaps {candidate.start.isoformat()} '
                        f"to {candidate.end.isoformat()}",
                    )
                created = PriceRange(
                    property_id=prop.id,
                    name=price.name,
                    start_date=candidate.start,
                    end_date=candidate.end,
                    owner_nightly_rate=price.owner_nightly_rate,
                    owner_weekly_rate=price.owner_weekly_rate,
                )
                target = await services.writer.create(created)
            else:
                message = f"Date range conflicts with existing {_describe(conflicts[0])}"
                if self.skip_conflicts:
                    warnings.append(f"{message}, skipped")
                    return RowSkipped(row_number=row.row_number, warnings=tuple(warnings))
                if not self.update_existing and context.mode is ImportMode.CREATE:
                    return failed(row, warnings, message)
                target = await services.writer.update(conflicts[0], record.changes("property_ref"))

        if created is not None:
            context.register_price_range(created)
            return RowImported(row_number=row.row_number, entity_id=target.id, warnings=tuple(warnings))
        return RowUpdated(row_number=row.row_number, entity_id=target.id, warnings=tuple(warnings))


__all__ = ["PriceRangeImportRow", "PriceRangeRowHandler"]
