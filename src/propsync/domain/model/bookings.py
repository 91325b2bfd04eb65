"""Booking-side entities: bookings and guest availability requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, ClassVar

from .entity import Entity
from .enums import (
    BookingSource,
    BookingStatus,
    BookingType,
    EntityType,
    RequestStatus,
    RequestUrgency,
)

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Booking(Entity):
    """A stay (or block) on a property's calendar.

    Bookings carry no uniqueness constraint; overlaps are checked by the
    overlap detector before writes.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.BOOKING

    property_id: UUID
    start_date: date
    end_date: date
    type: BookingType = BookingType.CONFIRMED
    status: BookingStatus = BookingStatus.CONFIRMED
    source: BookingSource = BookingSource.MANUAL
    guest_name: str | None = None
    guest_email: str | None = None
    guest_phone: str | None = None
    number_of_guests: int | None = None
    total_amount: float | None = None
    notes: str | None = None
    external_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def is_active(self) -> bool:
        return self.status is not BookingStatus.CANCELLED


@dataclass(eq=False, kw_only=True)
class AvailabilityRequest(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.AVAILABILITY_REQUEST

    property_id: UUID
    start_date: date
    end_date: date
    guest_name: str
    guest_email: str
    guest_phone: str = ""
    number_of_guests: int = 1
    message: str | None = None
    status: RequestStatus = RequestStatus.PENDING
    urgency: RequestUrgency = RequestUrgency.MEDIUM
    requested_by: str | None = None
