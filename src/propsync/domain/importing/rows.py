"""Immutable input rows handed to the import pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


_NON_ALPHANUMERIC = re.compile(r"[^0-9a-z]")

# spreadsheet shorthands, keyed by normalized header
HEADER_SYNONYMS: dict[str, str] = {
    "lat": "latitude",
    "gpslat": "latitude",
    "lng": "longitude",
    "lon": "longitude",
    "long": "longitude",
    "gpslng": "longitude",
    "rooms": "numberofrooms",
    "bathrooms": "numberofbathrooms",
    "capacity": "maxguests",
    "sleeps": "maxguests",
}


def header_key(column: str) -> str:
    """Case and punctuation insensitive key: ``property_name`` matches ``propertyName``."""

    key = _NON_ALPHANUMERIC.sub("", column.lower())
    return HEADER_SYNONYMS.get(key, key)


@dataclass(frozen=True, slots=True)
class RawRow:
    """Ordered column -> raw string mapping plus its 1-based source row number.

    Missing cells and ``None`` values read as empty strings; lookups strip
    surrounding whitespace and match headers by ``header_key``.
    """

    row_number: int
    cells: tuple[tuple[str, str], ...]

    @classmethod
    def from_mapping(cls, row_number: int, values: Mapping[str, object]) -> RawRow:
        if row_number < 1:
            raise ValueError("Row numbers are 1-based")
        cells = tuple(
            (str(column).strip(), "" if value is None else str(value))
            for column, value in values.items()
            if column is not None
        )
        return cls(row_number=row_number, cells=cells)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(column for column, _ in self.cells)

    def get(self, column: str, *aliases: str) -> str:
        """Return the first non-blank value among ``column`` and its aliases."""

        for name in (column, *aliases):
            wanted = header_key(name)
            for key, value in self.cells:
                if header_key(key) == wanted and value.strip():
                    return value.strip()
        return ""

    def has_any(self, columns: Iterable[str]) -> bool:
        return any(self.get(column) for column in columns)

    @property
    def is_blank(self) -> bool:
        return not any(value.strip() for _, value in self.cells)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.cells)


def rows_from_records(records: Iterable[Mapping[str, object]], *, start: int = 1) -> list[RawRow]:
    """Wrap parsed records (e.g. ``csv.DictReader`` output) into numbered rows."""

    return [RawRow.from_mapping(number, record) for number, record in enumerate(records, start)]


__all__ = ["HEADER_SYNONYMS", "RawRow", "header_key", "rows_from_records"]
