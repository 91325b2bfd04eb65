from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import uuid4

from propsync.domain.importing import BookingRowHandler, ImportMode
from propsync.domain.model import (
    Booking,
    BookingSource,
    BookingStatus,
    BookingType,
    Property,
)
from tests.helpers.importing import messages, run_report
from tests.helpers.rows import booking_record

if TYPE_CHECKING:
    from tests.helpers.memory_store import MemoryStore


def _seed(store: MemoryStore, *bookings: tuple[str, str]) -> Property:
    prop = Property(name="Villa Azure")
    store.seed(prop)
    for start, end in bookings:
        store.seed(
            Booking(
                property_id=prop.id,
                start_date=date.fromisoformat(start),
                end_date=date.fromisoformat(end),
                guest_name="Existing Guest",
            )
        )
    return prop


def test_rows_of_one_batch_are_not_checked_against_each_other(store: MemoryStore) -> None:
    _seed(store)

    report = run_report(
        store,
        BookingRowHandler(),
        {"propertyName": "Villa Azure", "startDate": "2024-06-01", "endDate": "2024-06-10"},
        {"propertyName": "Villa Azure", "startDate": "2024-06-05", "endDate": "2024-06-08"},
    )

    assert report.imported == 2
    assert report.warnings == []


def test_overlap_with_existing_booking_is_a_warning_in_create_mode(store: MemoryStore) -> None:
    _seed(store, ("2024-06-01", "2024-06-10"))

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-06-08", "2024-06-15", guestName="New Guest"),
    )

    assert report.imported == 1
    assert messages(report.warnings) == [
        (
            2,
            "Date conflict with CONFIRMED booking (Existing Guest) from 2024-06-01 to 2024-06-10",
        )
    ]
    assert len(store.all(Booking)) == 2


def test_overlap_is_an_error_in_both_mode(store: MemoryStore) -> None:
    _seed(store, ("2024-06-01", "2024-06-10"))

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-06-08", "2024-06-15"),
        mode=ImportMode.BOTH,
    )

    assert report.failed == 1
    assert len(store.all(Booking)) == 1


def test_touching_bookings_do_not_conflict(store: MemoryStore) -> None:
    _seed(store, ("2024-06-01", "2024-06-10"))

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-06-10", "2024-06-15"),
        mode=ImportMode.BOTH,
    )

    assert report.imported == 1
    assert report.warnings == []


def test_cancelled_bookings_never_conflict(store: MemoryStore) -> None:
    prop = _seed(store)
    store.seed(
        Booking(
            property_id=prop.id,
            start_date=date(2024, 6, 1),
            end_date=date(2024, 6, 10),
            status=BookingStatus.CANCELLED,
        )
    )

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-06-01", "2024-06-10"),
        mode=ImportMode.BOTH,
    )

    assert report.imported == 1


def test_unknown_property_is_not_auto_created(store: MemoryStore) -> None:
    _seed(store)

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Azure", "2024-06-01", "2024-06-10"),
    )

    assert messages(report.errors) == [
        (
            2,
            'Property "Azure" not found. Please import properties first. '
            "Similar properties: Villa Azure",
        )
    ]
    assert len(store.all(Property)) == 1


def test_created_booking_fields(store: MemoryStore) -> None:
    prop = _seed(store)
    booking_id = uuid4()

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record(
            str(prop.id),
            "2024-06-01",
            "2024-06-10",
            bookingId=str(booking_id),
            externalId="AIRBNB-42",
            type="tentative",
            status="pending",
            guestName="Ada Lovelace",
            guestEmail="ADA@example.com",
            guests="4",
            totalAmount="1999.90",
        ),
    )

    assert report.imported == 1
    (booking,) = store.all(Booking)
    assert booking.id == booking_id
    assert booking.property_id == prop.id
    assert (booking.type, booking.status) == (BookingType.TENTATIVE, BookingStatus.PENDING)
    assert booking.source is BookingSource.IMPORT
    assert booking.guest_email == "ada@example.com"
    assert booking.number_of_guests == 4
    assert booking.total_amount == 1999.9
    assert booking.external_id == "AIRBNB-42"
    assert booking.created_by == "tester"


def test_invalid_booking_id_fails_the_row(store: MemoryStore) -> None:
    _seed(store)

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-06-01", "2024-06-10", bookingId="not-a-uuid"),
    )

    assert messages(report.errors) == [(2, 'Invalid booking ID "not-a-uuid"')]


def test_update_requires_an_identity(store: MemoryStore) -> None:
    _seed(store)

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-06-01", "2024-06-10"),
        booking_record("Villa Azure", "2024-07-01", "2024-07-10", externalId="MISSING"),
        mode=ImportMode.UPDATE,
    )

    assert messages(report.errors) == [
        (2, "bookingId or externalId is required to update a booking"),
        (3, 'Booking "MISSING" not found'),
    ]


def test_update_by_booking_id_ignores_its_own_range(store: MemoryStore) -> None:
    prop = _seed(store)
    existing = Booking(
        property_id=prop.id,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 10),
        guest_name="Ada",
    )
    store.seed(existing)

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record(
            "Villa Azure",
            "2024-06-03",
            "2024-06-12",
            bookingId=str(existing.id),
            status="cancelled",
        ),
        mode=ImportMode.UPDATE,
    )

    assert report.updated == 1
    assert report.warnings == []
    assert (existing.start_date, existing.end_date) == (date(2024, 6, 3), date(2024, 6, 12))
    assert existing.status is BookingStatus.CANCELLED
    assert existing.guest_name == "Ada"
    assert existing.updated_by == "tester"


def test_cancelled_booking_can_be_reactivated_by_id(store: MemoryStore) -> None:
    prop = _seed(store)
    cancelled = Booking(
        property_id=prop.id,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 10),
        status=BookingStatus.CANCELLED,
    )
    store.seed(cancelled)

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record(
            "Villa Azure",
            "2024-06-01",
            "2024-06-10",
            bookingId=str(cancelled.id),
            status="confirmed",
        ),
        mode=ImportMode.UPDATE,
    )

    assert report.updated == 1
    assert cancelled.status is BookingStatus.CONFIRMED


def _seed_one(store: MemoryStore) -> tuple[Property, Booking]:
    prop = _seed(store)
    existing = Booking(
        property_id=prop.id,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 10),
        guest_name="Ada",
    )
    store.seed(existing)
    return prop, existing


def test_booking_cancelled_earlier_in_the_batch_frees_its_dates(store: MemoryStore) -> None:
    _, existing = _seed_one(store)

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record(
            "Villa Azure",
            "2024-06-01",
            "2024-06-10",
            bookingId=str(existing.id),
            status="cancelled",
        ),
        booking_record("Villa Azure", "2024-06-05", "2024-06-08"),
        mode=ImportMode.BOTH,
        chunk_size=1,
    )

    assert report.failed == 0
    assert (report.updated, report.imported) == (1, 1)
    assert existing.status is BookingStatus.CANCELLED


def test_booking_moved_earlier_in_the_batch_is_checked_at_its_new_dates(
    store: MemoryStore,
) -> None:
    _, existing = _seed_one(store)

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-07-01", "2024-07-10", bookingId=str(existing.id)),
        booking_record("Villa Azure", "2024-06-05", "2024-06-08"),
        booking_record("Villa Azure", "2024-07-05", "2024-07-08"),
        mode=ImportMode.BOTH,
        chunk_size=1,
    )

    assert (report.updated, report.imported, report.failed) == (1, 1, 1)
    assert messages(report.errors) == [
        (4, "Date conflict with CONFIRMED booking (Ada) from 2024-07-01 to 2024-07-10")
    ]


def test_booking_created_in_the_batch_stays_out_of_the_overlap_index_when_updated(
    store: MemoryStore,
) -> None:
    _seed(store)
    booking_id = str(uuid4())

    report = run_report(
        store,
        BookingRowHandler(),
        booking_record("Villa Azure", "2024-06-01", "2024-06-10", bookingId=booking_id),
        booking_record("Villa Azure", "2024-06-02", "2024-06-09", bookingId=booking_id),
        booking_record("Villa Azure", "2024-06-03", "2024-06-05"),
        mode=ImportMode.BOTH,
        chunk_size=1,
    )

    assert report.failed == 0
    assert (report.imported, report.updated) == (2, 1)
