"""Domain enums (pure, dependency-light).

The SQLAlchemy adapter persists enum values, not member names.
"""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Typed-reference discriminator used by audit entries and resolvers."""

    DESTINATION = "destination"
    PROPERTY = "property"
    BOOKING = "booking"
    CONTACT = "contact"
    CONTACT_PROPERTY = "contact_property"
    PRICE_RANGE = "price_range"
    OPERATIONAL_COST = "operational_cost"
    AVAILABILITY_REQUEST = "availability_request"


class PropertyStatus(StrEnum):
    PUBLISHED = "PUBLISHED"
    HIDDEN = "HIDDEN"
    ONBOARDING = "ONBOARDING"
    OFFBOARDED = "OFFBOARDED"


class BookingType(StrEnum):
    CONFIRMED = "CONFIRMED"
    TENTATIVE = "TENTATIVE"
    BLOCKED = "BLOCKED"
    MAINTENANCE = "MAINTENANCE"
    OWNER = "OWNER"
    OWNER_STAY = "OWNER_STAY"
    CONTRACT = "CONTRACT"


class BookingStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class BookingSource(StrEnum):
    MANUAL = "MANUAL"
    IMPORT = "IMPORT"


class ContactCategory(StrEnum):
    CLIENT = "CLIENT"
    OWNER = "OWNER"
    PROVIDER = "PROVIDER"
    ORGANIZATION = "ORGANIZATION"
    OTHER = "OTHER"


class ContactPropertyRelationship(StrEnum):
    OWNER = "OWNER"
    RENTER = "RENTER"
    MANAGER = "MANAGER"
    STAFF = "STAFF"
    EMERGENCY = "EMERGENCY"
    MAINTENANCE = "MAINTENANCE"
    AGENCY = "AGENCY"
    OTHER = "OTHER"


class CostType(StrEnum):
    HOUSEKEEPING = "HOUSEKEEPING"
    GARDENING = "GARDENING"
    POOL_MAINTENANCE = "POOL_MAINTENANCE"
    CHECK_IN_STAFF = "CHECK_IN_STAFF"
    OTHER = "OTHER"


class PriceType(StrEnum):
    PER_STAY = "PER_STAY"
    PER_NIGHT = "PER_NIGHT"


class RequestStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"


class RequestUrgency(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AuditAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    IMPORT = "import"
