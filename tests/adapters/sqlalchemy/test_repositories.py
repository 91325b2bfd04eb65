"""Tests for SQLAlchemy repositories."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from propsync.domain.model import (
    AuditAction,
    AuditLogEntry,
    Booking,
    BookingStatus,
    BookingType,
    Contact,
    ContactCategory,
    ContactPropertyLink,
    Destination,
    EntityType,
    Property,
    PropertyStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from propsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork


def test_entities_round_trip_with_enums_dates_and_json(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    destination = Destination(name="Mallorca", country="Spain")
    prop = Property(
        name="Villa Sol",
        destination_id=destination.id,
        status=PropertyStatus.ONBOARDING,
        categories=["pool", "sea view"],
        latitude=39.57,
    )

    async def scenario() -> Property | None:
        async with sqlite_unit_of_work() as uow:
            await uow.repositories.destinations.add(destination)
            await uow.repositories.properties.add(prop)
            await uow.commit()
        async with sqlite_unit_of_work() as uow:
            return await uow.repositories.properties.get(prop.id)

    loaded = asyncio.run(scenario())

    assert loaded is not None
    assert loaded is not prop
    assert loaded.name == "Villa Sol"
    assert loaded.destination_id == destination.id
    assert loaded.status is PropertyStatus.ONBOARDING
    assert loaded.categories == ["pool", "sea view"]
    assert loaded.updated_at.tzinfo is not None


def test_booking_repository_queries(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    sol, mar = Property(name="Villa Sol"), Property(name="Villa Mar")
    july = Booking(
        property_id=sol.id,
        start_date=date(2024, 7, 1),
        end_date=date(2024, 7, 5),
        external_id="EXT-7",
    )
    june = Booking(property_id=sol.id, start_date=date(2024, 6, 1), end_date=date(2024, 6, 5))
    cancelled = Booking(
        property_id=sol.id,
        start_date=date(2024, 5, 1),
        end_date=date(2024, 5, 5),
        status=BookingStatus.CANCELLED,
    )
    elsewhere = Booking(
        property_id=mar.id,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 5),
        type=BookingType.BLOCKED,
    )

    async def scenario() -> tuple[list[Booking], list[Booking], Booking | None, Booking | None]:
        async with sqlite_unit_of_work() as uow:
            await uow.repositories.properties.add(sol)
            await uow.repositories.properties.add(mar)
            for booking in (july, june, cancelled, elsewhere):
                await uow.repositories.bookings.add(booking)
            await uow.commit()
        async with sqlite_unit_of_work() as uow:
            repo = uow.repositories.bookings
            return (
                await repo.list_active(),
                await repo.list_active(property_id=sol.id),
                await repo.get_by_external_id("EXT-7"),
                await repo.get_by_external_id("EXT-404"),
            )

    everything, for_sol, by_external, missing = asyncio.run(scenario())

    assert {booking.id for booking in everything} == {july.id, june.id, elsewhere.id}
    assert [booking.id for booking in for_sol] == [june.id, july.id]
    assert by_external is not None
    assert by_external.id == july.id
    assert missing is None


def test_contact_lookup_by_email_is_case_insensitive(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    contact = Contact(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        category=ContactCategory.CLIENT,
    )

    async def scenario() -> Contact | None:
        async with sqlite_unit_of_work() as uow:
            await uow.repositories.contacts.add(contact)
            await uow.commit()
        async with sqlite_unit_of_work() as uow:
            return await uow.repositories.contacts.get_by_email("ADA@Example.com")

    found = asyncio.run(scenario())

    assert found is not None
    assert found.id == contact.id
    assert found.category is ContactCategory.CLIENT


def test_deleting_a_property_cascades_to_contact_links(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    sol, mar = Property(name="Villa Sol"), Property(name="Villa Mar")
    contact = Contact(first_name="Ada", last_name="Lovelace", email="ada@example.com")

    async def scenario() -> list[ContactPropertyLink]:
        async with sqlite_unit_of_work() as uow:
            repositories = uow.repositories
            await repositories.properties.add(sol)
            await repositories.properties.add(mar)
            await repositories.contacts.add(contact)
            await repositories.contact_links.add(
                ContactPropertyLink(contact_id=contact.id, property_id=sol.id)
            )
            await repositories.contact_links.add(
                ContactPropertyLink(contact_id=contact.id, property_id=mar.id)
            )
            await uow.commit()
        async with sqlite_unit_of_work() as uow:
            doomed = await uow.repositories.properties.get(sol.id)
            assert doomed is not None
            await uow.repositories.properties.delete(doomed)
            await uow.commit()
        async with sqlite_unit_of_work() as uow:
            return await uow.repositories.contact_links.list_for_contact(contact.id)

    links = asyncio.run(scenario())

    assert [link.property_id for link in links] == [mar.id]


def test_audit_log_entries_are_listed_oldest_first(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    first = AuditLogEntry(
        action=AuditAction.CREATE,
        entity_type=EntityType.PROPERTY,
        entity_id="p-1",
        summary="Created property Villa Sol",
        user_id="ops",
        after={"name": "Villa Sol", "categories": ["pool"]},
        created_at=datetime(2024, 6, 1, 9, 0, tzinfo=UTC),
    )
    second = AuditLogEntry(
        action=AuditAction.IMPORT,
        entity_type=EntityType.PROPERTY,
        entity_id="batch-1",
        summary="Imported property rows",
        created_at=datetime(2024, 6, 1, 9, 5, tzinfo=UTC),
    )

    async def scenario() -> list[AuditLogEntry]:
        async with sqlite_unit_of_work() as uow:
            await uow.repositories.audit_log.add(second)
            await uow.repositories.audit_log.add(first)
            await uow.commit()
        async with sqlite_unit_of_work() as uow:
            return await uow.repositories.audit_log.list_all()

    entries = asyncio.run(scenario())

    assert [entry.id for entry in entries] == [first.id, second.id]
    assert entries[0].after == {"name": "Villa Sol", "categories": ["pool"]}
    assert entries[1].action is AuditAction.IMPORT
