"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-16 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from propsync.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column[object]:
    return sa.Column("id", sa.Uuid(), nullable=False)


def _enum(name: str, *, nullable: bool = False) -> sa.Column[object]:
    return sa.Column(name, sa.String(length=32), nullable=nullable)


def _property_fk() -> sa.Column[object]:
    return sa.Column("property_id", sa.Uuid(), nullable=False)


def _property_fk_constraint(table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ["property_id"],
        ["properties.id"],
        name=op.f(f"fk_{table}_property_id_properties"),
        ondelete="CASCADE",
    )


def upgrade() -> None:
    op.create_table(
        "destinations",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=120), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_destinations")),
    )
    op.create_table(
        "properties",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("destination_id", sa.Uuid(), nullable=True),
        _enum("status"),
        sa.Column("number_of_rooms", sa.Integer(), nullable=True),
        sa.Column("number_of_bathrooms", sa.Integer(), nullable=True),
        sa.Column("max_guests", sa.Integer(), nullable=True),
        sa.Column("address", sa.String(length=512), nullable=True),
        sa.Column("city", sa.String(length=255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("segment", sa.String(length=120), nullable=True),
        sa.Column("categories", sa.JSON(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["destination_id"],
            ["destinations.id"],
            name=op.f("fk_properties_destination_id_destinations"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_properties")),
    )
    op.create_index("ix_properties_name", "properties", ["name"])

    op.create_table(
        "price_ranges",
        _id(),
        _property_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("owner_nightly_rate", sa.Float(), nullable=True),
        sa.Column("owner_weekly_rate", sa.Float(), nullable=True),
        sa.Column("is_validated", sa.Boolean(), nullable=False),
        _property_fk_constraint("price_ranges"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_price_ranges")),
    )
    op.create_table(
        "operational_costs",
        _id(),
        _property_fk(),
        _enum("cost_type"),
        sa.Column("estimated_price", sa.Float(), nullable=True),
        _enum("price_type"),
        _property_fk_constraint("operational_costs"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_operational_costs")),
    )
    op.create_table(
        "bookings",
        _id(),
        _property_fk(),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        _enum("type"),
        _enum("status"),
        _enum("source"),
        sa.Column("guest_name", sa.String(length=255), nullable=True),
        sa.Column("guest_email", sa.String(length=320), nullable=True),
        sa.Column("guest_phone", sa.String(length=64), nullable=True),
        sa.Column("number_of_guests", sa.Integer(), nullable=True),
        sa.Column("total_amount", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("updated_by", sa.String(length=255), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        _property_fk_constraint("bookings"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_bookings")),
    )
    op.create_index("ix_bookings_property_id_status", "bookings", ["property_id", "status"])
    op.create_index("ix_bookings_external_id", "bookings", ["external_id"])

    op.create_table(
        "availability_requests",
        _id(),
        _property_fk(),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("guest_name", sa.String(length=255), nullable=False),
        sa.Column("guest_email", sa.String(length=320), nullable=False),
        sa.Column("guest_phone", sa.String(length=64), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        _enum("status"),
        _enum("urgency"),
        sa.Column("requested_by", sa.String(length=255), nullable=True),
        _property_fk_constraint("availability_requests"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_availability_requests")),
    )
    op.create_table(
        "contacts",
        _id(),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        _enum("category"),
        sa.Column("language", sa.String(length=64), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_contacts")),
        sa.UniqueConstraint("email", name=op.f("uq_contacts_email")),
    )
    op.create_table(
        "contact_properties",
        _id(),
        sa.Column("contact_id", sa.Uuid(), nullable=False),
        _property_fk(),
        _enum("relationship"),
        sa.ForeignKeyConstraint(
            ["contact_id"],
            ["contacts.id"],
            name=op.f("fk_contact_properties_contact_id_contacts"),
            ondelete="CASCADE",
        ),
        _property_fk_constraint("contact_properties"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_contact_properties")),
        sa.UniqueConstraint(
            "contact_id", "property_id", name=op.f("uq_contact_properties_contact_id")
        ),
    )
    op.create_table(
        "audit_log",
        _id(),
        _enum("action"),
        _enum("entity_type"),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_audit_log")),
    )
    op.create_index("ix_audit_log_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_table("contact_properties")
    op.drop_table("contacts")
    op.drop_table("availability_requests")
    op.drop_index("ix_bookings_external_id", table_name="bookings")
    op.drop_index("ix_bookings_property_id_status", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("operational_costs")
    op.drop_table("price_ranges")
    op.drop_index("ix_properties_name", table_name="properties")
    op.drop_table("properties")
    op.drop_table("destinations")
