"""Application orchestration entry points."""

from __future__ import annotations

from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.adapters.csv_rows import read_csv_rows
from propsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from propsync.config import get_import_config
from propsync.domain.importing import (
    BatchReconciler,
    BookingRowHandler,
    ContactRowHandler,
    ImportMode,
    PriceRangeRowHandler,
    PropertyRowHandler,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from propsync.domain.importing import BatchOutcome, RawRow, RowHandler
    from propsync.domain.ports import UnitOfWorkFactory


log = getLogger(__name__)


class ImportTarget(StrEnum):
    PROPERTIES = "properties"
    BOOKINGS = "bookings"
    CONTACTS = "contacts"
    PRICES = "prices"


def build_row_handler(
    target: ImportTarget | str,
    *,
    skip_duplicates: bool = False,
    skip_conflicts: bool = False,
    update_existing: bool = False,
) -> RowHandler:
    match ImportTarget(target):
        case ImportTarget.PROPERTIES:
            return PropertyRowHandler()
        case ImportTarget.BOOKINGS:
            return BookingRowHandler()
        case ImportTarget.CONTACTS:
            return ContactRowHandler(skip_duplicates=skip_duplicates)
        case ImportTarget.PRICES:
            return PriceRangeRowHandler(
                skip_conflicts=skip_conflicts, update_existing=update_existing
            )


async def import_rows(
    target: ImportTarget | str,
    rows: Iterable[RawRow],
    *,
    mode: ImportMode | str = ImportMode.CREATE,
    actor_id: str | None = None,
    chunk_size: int | None = None,
    skip_duplicates: bool = False,
    skip_conflicts: bool = False,
    update_existing: bool = False,
    dry_run: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> BatchOutcome:
    """Run one import batch with the configured adapters."""

    config = get_import_config()
    effective_uow = unit_of_work_factory
    if effective_uow is None:
        if not is_started():
            await startup()
        effective_uow = SqlAlchemyUnitOfWork

    reconciler = BatchReconciler(
        unit_of_work_factory=effective_uow,
        chunk_size=chunk_size or config.chunk_size,
        actor_id=actor_id or config.actor_id,
    )
    handler = build_row_handler(
        target,
        skip_duplicates=skip_duplicates,
        skip_conflicts=skip_conflicts,
        update_existing=update_existing,
    )
    return await reconciler.run(handler, rows, mode=mode, dry_run=dry_run)


async def import_file(
    target: ImportTarget | str,
    path: Path,
    *,
    mode: ImportMode | str = ImportMode.CREATE,
    actor_id: str | None = None,
    chunk_size: int | None = None,
    skip_duplicates: bool = False,
    skip_conflicts: bool = False,
    update_existing: bool = False,
    dry_run: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> BatchOutcome:
    rows = read_csv_rows(path)
    log.info("Importing %s from %s (%s rows)", target, path, len(rows))
    return await import_rows(
        target,
        rows,
        mode=mode,
        actor_id=actor_id,
        chunk_size=chunk_size,
        skip_duplicates=skip_duplicates,
        skip_conflicts=skip_conflicts,
        update_existing=update_existing,
        dry_run=dry_run,
        unit_of_work_factory=unit_of_work_factory,
    )
