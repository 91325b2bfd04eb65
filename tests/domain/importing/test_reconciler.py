from __future__ import annotations

import asyncio
from datetime import date
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from propsync.domain.importing import (
    BatchAborted,
    BatchCompleted,
    BatchReconciler,
    BookingRowHandler,
    ImportMode,
    PropertyRowHandler,
    RowImported,
    UnsupportedImportModeError,
)
from propsync.domain.model import AuditAction, Booking, EntityType, Property
from propsync.domain.ports import RowWriteError, StoreUnavailableError
from tests.helpers.importing import messages, run_batch, run_report
from tests.helpers.rows import booking_record, make_rows

if TYPE_CHECKING:
    from propsync.domain.importing import RawRow, RowOutcome, RowServices
    from tests.helpers.memory_store import MemoryStore


class SpyHandler:
    """Records when each row starts and finishes; yields to the loop in between."""

    entity_type = EntityType.PROPERTY

    def __init__(self) -> None:
        self.events: list[tuple[str, int]] = []
        self.active = 0
        self.max_active = 0

    async def handle(self, row: RawRow, services: RowServices, warnings: list[str]) -> RowOutcome:
        _ = services, warnings
        self.events.append(("start", row.row_number))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        for _ in range(3):
            await asyncio.sleep(0)
        self.active -= 1
        self.events.append(("end", row.row_number))
        return RowImported(row_number=row.row_number, entity_id=uuid4())


def _seed_villa(store: MemoryStore, name: str = "Villa Azure") -> Property:
    prop = Property(name=name)
    store.seed(prop)
    return prop


def test_chunks_run_sequentially_with_concurrent_rows(store: MemoryStore) -> None:
    handler = SpyHandler()
    records = [{"name": f"Villa {index}"} for index in range(25)]

    report = run_report(store, handler, *records, chunk_size=10)

    assert report.imported == 25
    assert handler.max_active == 10
    starts = [number for kind, number in handler.events if kind == "start"]
    assert starts == list(range(2, 27))
    # every row of a chunk finishes before the next chunk starts
    chunk_bounds = [(2, 11), (12, 21), (22, 26)]
    positions = {event: index for index, event in enumerate(handler.events)}
    for (first, last), (next_first, _) in zip(chunk_bounds, chunk_bounds[1:], strict=False):
        last_end = max(positions[("end", number)] for number in range(first, last + 1))
        assert last_end < positions[("start", next_first)]


def test_chunk_size_must_be_positive(store: MemoryStore) -> None:
    with pytest.raises(ValueError, match="chunk_size"):
        BatchReconciler(unit_of_work_factory=store.unit_of_work, chunk_size=0)


def test_invalid_row_does_not_affect_siblings(store: MemoryStore) -> None:
    _seed_villa(store)
    records = [
        booking_record("Villa Azure", "2024-01-01", "2024-01-05"),
        booking_record("Villa Azure", "2024-02-01", "2024-02-05"),
        booking_record("Villa Azure", "2024-03-10", "2024-03-01"),
        booking_record("Villa Azure", "2024-04-01", "2024-04-05"),
        booking_record("Villa Azure", "2024-05-01", "2024-05-05"),
    ]

    report = run_report(store, BookingRowHandler(), *records)

    assert report.total == 5
    assert report.imported == 4
    assert report.failed == 1
    assert messages(report.errors) == [
        (4, "End date (2024-03-01) must be after start date (2024-03-10)")
    ]
    assert len(store.all(Booking)) == 4
    assert report.success


def test_existing_identity_fails_in_create_mode_and_updates_in_update_mode(
    store: MemoryStore,
) -> None:
    prop = _seed_villa(store)
    store.seed(
        Booking(
            property_id=prop.id,
            start_date=date(2024, 6, 1),
            end_date=date(2024, 6, 10),
            external_id="EXT-1",
        )
    )
    record = booking_record("Villa Azure", "2024-06-01", "2024-06-12", externalId="EXT-1")

    created = run_report(store, BookingRowHandler(), record, mode=ImportMode.CREATE)
    updated = run_report(store, BookingRowHandler(), record, mode=ImportMode.UPDATE)

    assert (created.failed, created.updated) == (1, 0)
    assert messages(created.errors) == [(2, 'Booking "EXT-1" already exists')]
    assert (updated.failed, updated.updated) == (0, 1)
    (booking,) = store.all(Booking)
    assert booking.end_date == date(2024, 6, 12)


def test_blank_rows_are_skipped_silently(store: MemoryStore) -> None:
    report = run_report(store, PropertyRowHandler(), {"name": "Villa Sol"}, {"name": "  ", "city": ""})

    assert (report.imported, report.skipped, report.failed) == (1, 1, 0)
    assert report.errors == []
    assert report.warnings == []


def test_empty_batch_is_not_a_success(store: MemoryStore) -> None:
    report = run_report(store, PropertyRowHandler())

    assert report.total == 0
    assert not report.success
    assert store.commits == 1


def test_all_failed_batch_is_not_a_success(store: MemoryStore) -> None:
    report = run_report(store, PropertyRowHandler(), {"city": "Palma"}, {"city": "Ibiza"})

    assert report.failed == 2
    assert not report.success


def test_unsupported_mode_is_rejected_before_any_work(store: MemoryStore) -> None:
    reconciler = BatchReconciler(unit_of_work_factory=store.unit_of_work)

    with pytest.raises(UnsupportedImportModeError):
        asyncio.run(reconciler.run(PropertyRowHandler(), make_rows({"name": "x"}), mode="merge"))

    assert store.commits == 0
    assert store.rollbacks == 0


def test_mode_strings_are_accepted(store: MemoryStore) -> None:
    report = run_report(store, PropertyRowHandler(), {"name": "Villa Sol"}, mode=" BOTH ")

    assert report.imported == 1


def test_store_rejection_fails_only_that_row(store: MemoryStore) -> None:
    def reject_bad(entity: object) -> BaseException | None:
        if isinstance(entity, Property) and entity.name == "Bad Villa":
            return RowWriteError("CHECK constraint failed: properties")
        return None

    store.fail_when = reject_bad

    report = run_report(
        store,
        PropertyRowHandler(),
        {"name": "Good Villa"},
        {"name": "Bad Villa"},
        {"name": "Other Villa"},
    )

    assert (report.imported, report.failed) == (2, 1)
    assert messages(report.errors) == [(3, "CHECK constraint failed: properties")]
    assert sorted(prop.name for prop in store.all(Property)) == ["Good Villa", "Other Villa"]


def test_unexpected_row_exception_is_reported(store: MemoryStore) -> None:
    def explode(entity: object) -> BaseException | None:
        if isinstance(entity, Property) and entity.name == "Cursed Villa":
            return RuntimeError("boom")
        return None

    store.fail_when = explode

    report = run_report(store, PropertyRowHandler(), {"name": "Cursed Villa"}, {"name": "Villa Sol"})

    assert messages(report.errors) == [(2, "Unexpected error: boom")]
    assert report.imported == 1


def test_store_unavailable_aborts_and_rolls_back_everything(store: MemoryStore) -> None:
    def disconnect(entity: object) -> BaseException | None:
        if isinstance(entity, Property) and entity.name == "Villa 3":
            return StoreUnavailableError("database is locked")
        return None

    store.fail_when = disconnect
    records = [{"name": f"Villa {index}", "destination": "Mallorca"} for index in range(6)]

    outcome = run_batch(store, PropertyRowHandler(), *records, chunk_size=2)

    assert isinstance(outcome, BatchAborted)
    assert outcome.reason == "database is locked"
    report = outcome.report
    assert report.aborted
    assert (report.total, report.failed, report.imported) == (6, 6, 0)
    assert messages(report.errors) == [
        (0, "Import aborted, no changes were saved: database is locked")
    ]
    assert not report.success
    assert store.all(Property) == []
    assert store.audit == []
    assert store.commits == 0


def test_committed_batch_records_one_import_audit_entry(store: MemoryStore) -> None:
    outcome = run_batch(store, PropertyRowHandler(), {"name": "Villa Sol"}, {"city": "Palma"})

    assert isinstance(outcome, BatchCompleted)
    imports = [entry for entry in store.audit if entry.action is AuditAction.IMPORT]
    assert len(imports) == 1
    (entry,) = imports
    assert entry.entity_type is EntityType.PROPERTY
    assert entry.user_id == "tester"
    assert entry.after == {"total": 2, "imported": 1, "updated": 0, "skipped": 0, "failed": 1}
    creates = [entry for entry in store.audit if entry.action is AuditAction.CREATE]
    assert [entry.summary for entry in creates] == ["Created property Villa Sol"]


def test_diagnostics_are_ordered_by_row_number(store: MemoryStore) -> None:
    records = [{"city": f"City {index}"} for index in range(12)]

    report = run_report(store, PropertyRowHandler(), *records, chunk_size=5)

    assert [item.row_number for item in report.errors] == list(range(2, 14))
