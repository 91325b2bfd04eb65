"""CSV file source for import rows."""

from __future__ import annotations

import csv
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.domain.importing import RawRow, rows_from_records

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

# data rows start on line 2, after the header
FIRST_DATA_LINE = 2


def read_csv_rows(path: Path, *, encoding: str = "utf-8-sig") -> list[RawRow]:
    """Read ``path`` with a header row; row numbers match the file's line numbers."""

    with path.open(newline="", encoding=encoding) as handle:
        reader = csv.DictReader(handle)
        rows = rows_from_records(reader, start=FIRST_DATA_LINE)
    log.debug("Read %s rows from %s", len(rows), path)
    return rows
