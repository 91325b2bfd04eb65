"""Half-open date ranges and overlap detection scoped per resource."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date
    from uuid import UUID

    from propsync.domain.model import Booking, BookingType


class InvalidDateRangeError(ValueError):
    """Raised when a range does not end strictly after it starts."""


class ConflictKind(StrEnum):
    OVERLAP = "overlap"
    ENCOMPASSING = "encompassing"  # candidate contains the existing range
    ENCOMPASSED = "encompassed"  # existing range contains the candidate


@dataclass(frozen=True, slots=True)
class DateRange:
    """``[start, end)`` with ``start < end``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidDateRangeError(
                f"End date must be after start date ({self.start.isoformat()} >= "
                f"{self.end.isoformat()})"
            )

    def overlaps(self, other: DateRange) -> bool:
        return overlaps(self, other)


def overlaps(first: DateRange, second: DateRange) -> bool:
    """Return whether two half-open ranges share at least one night.

    Touching ranges (one ends the day the other starts) do not overlap.
    """

    s1, e1 = first.start, first.end
    s2, e2 = second.start, second.end
    starts_inside = s2 <= s1 < e2
    ends_inside = s2 < e1 <= e2
    contains = s1 <= s2 and e1 >= e2
    return starts_inside or ends_inside or contains


def classify(candidate: DateRange, existing: DateRange) -> ConflictKind:
    if candidate.start <= existing.start and candidate.end >= existing.end:
        return ConflictKind.ENCOMPASSING
    if existing.start <= candidate.start and existing.end >= candidate.end:
        return ConflictKind.ENCOMPASSED
    return ConflictKind.OVERLAP


@dataclass(frozen=True, slots=True)
class IndexedRange:
    """An existing range registered for a resource."""

    owner_id: UUID
    range: DateRange
    type: BookingType
    label: str | None = None


@dataclass(frozen=True, slots=True)
class ConflictRecord:
    existing: IndexedRange
    kind: ConflictKind

    @property
    def type(self) -> BookingType:
        return self.existing.type

    def describe(self) -> str:
        span = f"{self.existing.range.start.isoformat()} to {self.existing.range.end.isoformat()}"
        who = f" ({self.existing.label})" if self.existing.label else ""
        return f"{self.type.value} booking{who} from {span}"


@dataclass(slots=True)
class RangeIndex:
    """Existing ranges grouped by resource id; ranges of different resources never interact."""

    _by_resource: dict[UUID, list[IndexedRange]] = field(
        default_factory=lambda: defaultdict(list)
    )

    @classmethod
    def from_bookings(cls, bookings: Iterable[Booking]) -> RangeIndex:
        """Index active bookings; cancelled ones and malformed ranges are ignored."""

        index = cls()
        for booking in bookings:
            if not booking.is_active or booking.start_date >= booking.end_date:
                continue
            index.add(booking.property_id, booking_range(booking), booking.type, owner=booking)
        return index

    def add(
        self,
        resource_id: UUID,
        date_range: DateRange,
        range_type: BookingType,
        *,
        owner: Booking | None = None,
        owner_id: UUID | None = None,
    ) -> None:
        if owner is not None:
            owner_id = owner.id
            label = owner.guest_name
        else:
            label = None
        if owner_id is None:
            raise ValueError("An owner or owner_id is required to index a range")
        self._by_resource[resource_id].append(
            IndexedRange(owner_id=owner_id, range=date_range, type=range_type, label=label)
        )

    def discard(self, resource_id: UUID, owner_id: UUID) -> None:
        entries = self._by_resource.get(resource_id)
        if entries:
            entries[:] = [entry for entry in entries if entry.owner_id != owner_id]

    def find_conflicts(
        self,
        resource_id: UUID,
        candidate: DateRange,
        *,
        exclude: UUID | None = None,
    ) -> list[ConflictRecord]:
        """Return the existing ranges of ``resource_id`` that overlap ``candidate``."""

        return [
            ConflictRecord(existing=entry, kind=classify(candidate, entry.range))
            for entry in self._by_resource.get(resource_id, ())
            if entry.owner_id != exclude and overlaps(candidate, entry.range)
        ]


def booking_range(booking: Booking) -> DateRange:
    return DateRange(booking.start_date, booking.end_date)


__all__ = [
    "ConflictKind",
    "ConflictRecord",
    "DateRange",
    "IndexedRange",
    "InvalidDateRangeError",
    "RangeIndex",
    "booking_range",
    "classify",
    "overlaps",
]
