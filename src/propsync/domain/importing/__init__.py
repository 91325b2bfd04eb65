"""Bulk import pipeline: validate, resolve, check overlaps, write, report."""

from __future__ import annotations

from propsync.domain.importing.context import (
    BatchContext,
    ImportMode,
    UnsupportedImportModeError,
    parse_mode,
)
from propsync.domain.importing.handlers import (
    BookingRowHandler,
    ContactRowHandler,
    PriceRangeRowHandler,
    PropertyRowHandler,
    RowHandler,
    RowServices,
)
from propsync.domain.importing.reconciler import DEFAULT_CHUNK_SIZE, BatchReconciler
from propsync.domain.importing.report import (
    BatchAborted,
    BatchCompleted,
    BatchOutcome,
    ImportReport,
    RowDiagnostic,
    RowFailed,
    RowImported,
    RowOutcome,
    RowSkipped,
    RowUpdated,
)
from propsync.domain.importing.resolve import (
    ReferenceResolver,
    ResolutionMethod,
    ResolvedReference,
    UnresolvedReference,
)
from propsync.domain.importing.rows import RawRow, rows_from_records
from propsync.domain.importing.writer import EntityWriter

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "BatchAborted",
    "BatchCompleted",
    "BatchContext",
    "BatchOutcome",
    "BatchReconciler",
    "BookingRowHandler",
    "ContactRowHandler",
    "EntityWriter",
    "ImportMode",
    "ImportReport",
    "PriceRangeRowHandler",
    "PropertyRowHandler",
    "RawRow",
    "ReferenceResolver",
    "ResolutionMethod",
    "ResolvedReference",
    "RowDiagnostic",
    "RowFailed",
    "RowHandler",
    "RowImported",
    "RowOutcome",
    "RowServices",
    "RowSkipped",
    "RowUpdated",
    "UnresolvedReference",
    "UnsupportedImportModeError",
    "parse_mode",
    "rows_from_records",
]
