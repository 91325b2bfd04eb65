"""Shared row-handler contract and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from propsync.domain.importing.report import RowFailed
from propsync.domain.importing.validation import InvalidRecord, validate_row

if TYPE_CHECKING:
    from propsync.domain.importing.context import BatchContext
    from propsync.domain.importing.report import RowOutcome
    from propsync.domain.importing.resolve import ReferenceResolver
    from propsync.domain.importing.rows import RawRow
    from propsync.domain.importing.schema import RowModel
    from propsync.domain.importing.validation import ValidRecord
    from propsync.domain.importing.writer import EntityWriter
    from propsync.domain.model import EntityType


@dataclass(frozen=True, slots=True)
class RowServices:
    """Batch-scoped collaborators threaded through every row."""

    context: BatchContext
    writer: EntityWriter
    resolver: ReferenceResolver


@runtime_checkable
class RowHandler(Protocol):
    """Turns one raw row into a row outcome for a specific entity kind.

    Handlers append caveats to ``warnings`` as they go so that they survive
    an exception raised later in the row.
    """

    @property
    def entity_type(self) -> EntityType: ...

    async def handle(
        self,
        row: RawRow,
        services: RowServices,
        warnings: list[str],
    ) -> RowOutcome: ...


def validate_or_fail[M: RowModel](
    row: RawRow,
    model: type[M],
    warnings: list[str],
) -> ValidRecord[M] | RowFailed:
    result = validate_row(row, model)
    warnings.extend(result.warnings)
    if isinstance(result, InvalidRecord):
        return RowFailed(row_number=row.row_number, errors=tuple(result.messages), warnings=tuple(warnings))
    return result


def failed(row: RawRow, warnings: list[str], *errors: str) -> RowFailed:
    return RowFailed(row_number=row.row_number, errors=errors, warnings=tuple(warnings))
