"""SQLAlchemy mapping metadata for the propsync domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from propsync.domain.model import (
    AuditAction,
    AuditLogEntry,
    AvailabilityRequest,
    Booking,
    BookingSource,
    BookingStatus,
    BookingType,
    Contact,
    ContactCategory,
    ContactPropertyLink,
    ContactPropertyRelationship,
    CostType,
    Destination,
    EntityType,
    OperationalCost,
    PriceRange,
    PriceType,
    Property,
    PropertyStatus,
    RequestStatus,
    RequestUrgency,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
ENUM_LENGTH: Final[int] = 32


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _enum_column(name: str, enum_cls: type[StrEnum], **kwargs: object) -> Column[object]:
    """Enum stored by value as a plain string column (no native DB enum)."""

    return Column(
        name,
        Enum(
            enum_cls,
            native_enum=False,
            create_constraint=False,
            length=ENUM_LENGTH,
            values_callable=_enum_values,
        ),
        **kwargs,  # pyright: ignore[reportArgumentType]
    )


def _id_column() -> Column[uuid.UUID]:
    return Column("id", UUIDColumnType, primary_key=True)


def _property_fk(*, nullable: bool = False) -> Column[uuid.UUID]:
    return Column(
        "property_id",
        UUIDColumnType,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=nullable,
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

destination_table = Table(
    "destinations",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String(255), nullable=False),
    Column("country", String(120), nullable=False),
)

property_table = Table(
    "properties",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String(255), nullable=False),
    Column(
        "destination_id",
        UUIDColumnType,
        ForeignKey("destinations.id", ondelete="SET NULL"),
        nullable=True,
    ),
    _enum_column("status", PropertyStatus, nullable=False),
    Column("number_of_rooms", Integer),
    Column("number_of_bathrooms", Integer),
    Column("max_guests", Integer),
    Column("address", String(512)),
    Column("city", String(255)),
    Column("latitude", Float),
    Column("longitude", Float),
    Column("segment", String(120)),
    Column("categories", JSON, nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_properties_name", "name"),
)

price_range_table = Table(
    "price_ranges",
    mapper_registry.metadata,
    _id_column(),
    _property_fk(),
    Column("name", String(255), nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("owner_nightly_rate", Float),
    Column("owner_weekly_rate", Float),
    Column("is_validated", Boolean, nullable=False),
)

operational_cost_table = Table(
    "operational_costs",
    mapper_registry.metadata,
    _id_column(),
    _property_fk(),
    _enum_column("cost_type", CostType, nullable=False),
    Column("estimated_price", Float),
    _enum_column("price_type", PriceType, nullable=False),
)

booking_table = Table(
    "bookings",
    mapper_registry.metadata,
    _id_column(),
    _property_fk(),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    _enum_column("type", BookingType, nullable=False),
    _enum_column("status", BookingStatus, nullable=False),
    _enum_column("source", BookingSource, nullable=False),
    Column("guest_name", String(255)),
    Column("guest_email", String(320)),
    Column("guest_phone", String(64)),
    Column("number_of_guests", Integer),
    Column("total_amount", Float),
    Column("notes", Text),
    Column("external_id", String(255)),
    Column("created_by", String(255)),
    Column("updated_by", String(255)),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_bookings_property_id_status", "property_id", "status"),
    Index("ix_bookings_external_id", "external_id"),
)

availability_request_table = Table(
    "availability_requests",
    mapper_registry.metadata,
    _id_column(),
    _property_fk(),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("guest_name", String(255), nullable=False),
    Column("guest_email", String(320), nullable=False),
    Column("guest_phone", String(64), nullable=False),
    Column("number_of_guests", Integer, nullable=False),
    Column("message", Text),
    _enum_column("status", RequestStatus, nullable=False),
    _enum_column("urgency", RequestUrgency, nullable=False),
    Column("requested_by", String(255)),
)

contact_table = Table(
    "contacts",
    mapper_registry.metadata,
    _id_column(),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("email", String(320), nullable=True),
    Column("phone", String(64)),
    _enum_column("category", ContactCategory, nullable=False),
    Column("language", String(64), nullable=False),
    Column("comments", Text),
    UniqueConstraint("email"),
)

contact_property_table = Table(
    "contact_properties",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "contact_id",
        UUIDColumnType,
        ForeignKey("contacts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    _property_fk(),
    _enum_column("relationship", ContactPropertyRelationship, nullable=False),
    UniqueConstraint("contact_id", "property_id"),
)

audit_log_table = Table(
    "audit_log",
    mapper_registry.metadata,
    _id_column(),
    _enum_column("action", AuditAction, nullable=False),
    _enum_column("entity_type", EntityType, nullable=False),
    Column("entity_id", String(64), nullable=False),
    Column("summary", Text, nullable=False),
    Column("user_id", String(255)),
    Column("before", JSON),
    Column("after", JSON),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_audit_log_entity", "entity_type", "entity_id"),
)


TABLE_BY_CLASS: Final[dict[type[object], Table]] = {
    Destination: destination_table,
    Property: property_table,
    PriceRange: price_range_table,
    OperationalCost: operational_cost_table,
    Booking: booking_table,
    AvailabilityRequest: availability_request_table,
    Contact: contact_table,
    ContactPropertyLink: contact_property_table,
    AuditLogEntry: audit_log_table,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model.

    Entities reference each other by id columns only; there are no ORM
    relationships to lazy-load.
    """

    log.info("Starting SQLAlchemy mappers")
    for entity_cls, table in TABLE_BY_CLASS.items():
        mapper_registry.map_imperatively(entity_cls, table)
    orm.configure_mappers()
    return mapper_registry


def create_all_tables(connection: Connection) -> None:
    """Create database tables for the mapped metadata (sync connection, see ``run_sync``)."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(connection)
