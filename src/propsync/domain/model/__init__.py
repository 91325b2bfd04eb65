"""Public domain model surface."""

from __future__ import annotations

from propsync.domain.model.audit import AuditLogEntry
from propsync.domain.model.bookings import AvailabilityRequest, Booking
from propsync.domain.model.catalog import Destination, OperationalCost, PriceRange, Property
from propsync.domain.model.contacts import Contact, ContactPropertyLink
from propsync.domain.model.entity import Entity, Snapshot, new_id, snapshot
from propsync.domain.model.enums import (
    AuditAction,
    BookingSource,
    BookingStatus,
    BookingType,
    ContactCategory,
    ContactPropertyRelationship,
    CostType,
    EntityType,
    PriceType,
    PropertyStatus,
    RequestStatus,
    RequestUrgency,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "Snapshot",
    "new_id",
    "snapshot",
    # catalog
    "Destination",
    "Property",
    "PriceRange",
    "OperationalCost",
    # bookings
    "Booking",
    "AvailabilityRequest",
    # contacts
    "Contact",
    "ContactPropertyLink",
    # audit
    "AuditLogEntry",
    # enums
    "AuditAction",
    "BookingSource",
    "BookingStatus",
    "BookingType",
    "ContactCategory",
    "ContactPropertyRelationship",
    "CostType",
    "EntityType",
    "PriceType",
    "PropertyStatus",
    "RequestStatus",
    "RequestUrgency",
]
