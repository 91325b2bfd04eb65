"""Batch orchestration: one transaction, chunked concurrent rows, per-row isolation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.domain.importing.context import BatchContext, ImportMode, parse_mode
from propsync.domain.importing.handlers.base import RowServices
from propsync.domain.importing.report import (
    BatchAborted,
    BatchCompleted,
    ImportReport,
    RowFailed,
    RowSkipped,
)
from propsync.domain.importing.resolve import ReferenceResolver
from propsync.domain.importing.writer import EntityWriter
from propsync.domain.ports import RowWriteError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsync.domain.importing.handlers.base import RowHandler
    from propsync.domain.importing.report import BatchOutcome, RowOutcome
    from propsync.domain.importing.rows import RawRow
    from propsync.domain.ports import UnitOfWorkFactory


log = getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10


@dataclass(frozen=True, slots=True)
class _RowAborted:
    """Infrastructure failure inside a row; aborts the whole batch."""

    row_number: int
    error: StoreUnavailableError


class BatchReconciler:
    """Run a row handler over a batch inside one unit of work.

    Rows are processed in chunks: concurrently within a chunk, chunks one
    after another. Row failures are recorded and the batch continues; a
    ``StoreUnavailableError`` rolls the whole batch back. A dry run processes
    every row the same way and then rolls back instead of committing.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: UnitOfWorkFactory,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        actor_id: str = "system",
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self._uow_factory = unit_of_work_factory
        self.chunk_size = chunk_size
        self.actor_id = actor_id

    async def run(
        self,
        handler: RowHandler,
        rows: Iterable[RawRow],
        *,
        mode: ImportMode | str = ImportMode.CREATE,
        dry_run: bool = False,
    ) -> BatchOutcome:
        resolved_mode = parse_mode(mode)
        batch = list(rows)
        entity = handler.entity_type.value
        log.info(
            "Starting %s import: rows=%s, mode=%s, chunk_size=%s, dry_run=%s",
            entity,
            len(batch),
            resolved_mode.value,
            self.chunk_size,
            dry_run,
        )

        try:
            report = await self._run_transaction(handler, batch, resolved_mode, dry_run=dry_run)
        except StoreUnavailableError as exc:
            log.exception("Aborted %s import; batch rolled back", entity)
            message = f"Import aborted, no changes were saved: {exc}"
            return BatchAborted(report=ImportReport.aborted_batch(len(batch), message), reason=str(exc))

        suffix = " (dry run, rolled back)" if dry_run else ""
        log.info("Finished %s import%s: %s", entity, suffix, report.summary())
        return BatchCompleted(report=report, dry_run=dry_run)

    async def import_rows(
        self,
        handler: RowHandler,
        rows: Iterable[RawRow],
        *,
        mode: ImportMode | str = ImportMode.CREATE,
    ) -> ImportReport:
        outcome = await self.run(handler, rows, mode=mode)
        return outcome.report

    async def _run_transaction(
        self,
        handler: RowHandler,
        batch: list[RawRow],
        mode: ImportMode,
        *,
        dry_run: bool,
    ) -> ImportReport:
        async with self._uow_factory() as uow:
            context = await BatchContext.preload(uow.repositories, mode=mode, actor_id=self.actor_id)
            writer = EntityWriter(uow, actor_id=self.actor_id)
            services = RowServices(
                context=context,
                writer=writer,
                resolver=ReferenceResolver(context, writer),
            )

            outcomes: list[RowOutcome] = []
            for chunk in batched(batch, self.chunk_size):
                results = await asyncio.gather(
                    *(self._process_row(handler, row, services) for row in chunk)
                )
                for result in results:
                    if isinstance(result, _RowAborted):
                        raise result.error
                    outcomes.append(result)

            report = ImportReport.from_outcomes(len(batch), outcomes)
            if dry_run:
                log.debug("Dry run, rolling back %s rows", len(batch))
            else:
                await writer.record_import(handler.entity_type, report)
                await uow.commit()
        return report

    async def _process_row(
        self,
        handler: RowHandler,
        row: RawRow,
        services: RowServices,
    ) -> RowOutcome | _RowAborted:
        if row.is_blank:
            return RowSkipped(row_number=row.row_number)

        warnings: list[str] = []
        try:
            outcome = await handler.handle(row, services, warnings)
        except StoreUnavailableError as exc:
            return _RowAborted(row_number=row.row_number, error=exc)
        except RowWriteError as exc:
            log.debug("Row %s rejected by the store: %s", row.row_number, exc)
            return RowFailed(row_number=row.row_number, errors=(str(exc),), warnings=tuple(warnings))
        except Exception as exc:  # noqa: BLE001
            log.debug("Row %s failed unexpectedly", row.row_number, exc_info=True)
            return RowFailed(
                row_number=row.row_number,
                errors=(f"Unexpected error: {exc}",),
                warnings=tuple(warnings),
            )

        if isinstance(outcome, RowFailed):
            log.debug("Row %s failed: %s", row.row_number, "; ".join(outcome.errors))
        return outcome


__all__ = ["DEFAULT_CHUNK_SIZE", "BatchReconciler"]
