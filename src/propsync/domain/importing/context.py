"""Per-batch preloaded lookup state shared by every row of one import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.domain.date_ranges import RangeIndex

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from uuid import UUID

    from propsync.domain.model import Booking, Contact, Destination, Entity, PriceRange, Property
    from propsync.domain.ports import ImportRepositories


log = getLogger(__name__)


class ImportMode(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    BOTH = "both"


class UnsupportedImportModeError(ValueError):
    """Raised to the caller when an import is requested with an unknown mode."""


def parse_mode(value: ImportMode | str) -> ImportMode:
    if isinstance(value, ImportMode):
        return value
    try:
        return ImportMode(str(value).strip().lower())
    except ValueError as exc:
        supported = ", ".join(mode.value for mode in ImportMode)
        raise UnsupportedImportModeError(
            f"Unsupported import mode {value!r} (expected one of: {supported})"
        ) from exc


class ReferenceIndex[T: Entity]:
    """ID map plus lower-cased name map; the first entity seen for a name wins."""

    def __init__(self, name_of: Callable[[T], str], entities: Iterable[T] = ()) -> None:
        self._name_of = name_of
        self._by_id: dict[UUID, T] = {}
        self._by_name: dict[str, T] = {}
        for entity in entities:
            self.add(entity)

    def add(self, entity: T) -> None:
        self._by_id[entity.id] = entity
        self._by_name.setdefault(self._name_of(entity).strip().lower(), entity)

    def get(self, entity_id: UUID) -> T | None:
        return self._by_id.get(entity_id)

    def find_by_name(self, name: str) -> T | None:
        return self._by_name.get(name.strip().lower())

    def names(self) -> Iterator[str]:
        """Canonical names in insertion order."""

        return (self._name_of(entity) for entity in self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._by_id


def _property_name(entity: Property) -> str:
    return entity.name


def _destination_name(entity: Destination) -> str:
    return entity.name


@dataclass(slots=True, kw_only=True)
class BatchContext:
    """Lookup maps built once before any row is processed.

    Overlap checks consult ``ranges`` only, which holds the active bookings
    that existed when the batch started (kept current as rows update them);
    the booking id maps include cancelled ones so they can still be updated.
    """

    mode: ImportMode
    actor_id: str
    properties: ReferenceIndex[Property] = field(
        default_factory=lambda: ReferenceIndex(_property_name)
    )
    destinations: ReferenceIndex[Destination] = field(
        default_factory=lambda: ReferenceIndex(_destination_name)
    )
    contacts_by_email: dict[str, Contact] = field(default_factory=dict)
    bookings_by_id: dict[UUID, Booking] = field(default_factory=dict)
    bookings_by_external_id: dict[str, Booking] = field(default_factory=dict)
    ranges: RangeIndex = field(default_factory=RangeIndex)
    created_booking_ids: set[UUID] = field(default_factory=set)
    price_ranges: dict[UUID, list[PriceRange]] = field(default_factory=dict)

    @classmethod
    async def preload(
        cls,
        repositories: ImportRepositories,
        *,
        mode: ImportMode,
        actor_id: str,
    ) -> BatchContext:
        properties = await repositories.properties.list_all()
        destinations = await repositories.destinations.list_all()
        contacts = await repositories.contacts.list_all()
        bookings = await repositories.bookings.list_all()
        price_ranges = await repositories.price_ranges.list_all()

        context = cls(mode=mode, actor_id=actor_id)
        for prop in properties:
            context.properties.add(prop)
        for destination in destinations:
            context.destinations.add(destination)
        for contact in contacts:
            context.register_contact(contact)
        for booking in bookings:
            context.register_booking(booking)
        context.ranges = RangeIndex.from_bookings(bookings)
        for price_range in price_ranges:
            context.register_price_range(price_range)

        log.debug(
            "Preloaded batch context: properties=%s, destinations=%s, contacts=%s, bookings=%s",
            len(context.properties),
            len(context.destinations),
            len(context.contacts_by_email),
            len(context.bookings_by_id),
        )
        return context

    def register_contact(self, contact: Contact) -> None:
        if contact.email:
            self.contacts_by_email.setdefault(contact.email.lower(), contact)

    def register_booking(self, booking: Booking, *, created: bool = False) -> None:
        if created:
            self.created_booking_ids.add(booking.id)
        self.bookings_by_id[booking.id] = booking
        if booking.external_id:
            self.bookings_by_external_id.setdefault(booking.external_id, booking)

    def register_price_range(self, price_range: PriceRange) -> None:
        self.price_ranges.setdefault(price_range.property_id, []).append(price_range)


__all__ = [
    "BatchContext",
    "ImportMode",
    "ReferenceIndex",
    "UnsupportedImportModeError",
    "parse_mode",
]
