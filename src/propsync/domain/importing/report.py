"""Row and batch outcomes plus the aggregated import report."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID


class RowOutcomeKind(StrEnum):
    IMPORTED = "imported"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class RowImported:
    row_number: int
    entity_id: UUID
    warnings: tuple[str, ...] = ()
    kind: Literal[RowOutcomeKind.IMPORTED] = RowOutcomeKind.IMPORTED


@dataclass(frozen=True, slots=True, kw_only=True)
class RowUpdated:
    row_number: int
    entity_id: UUID
    warnings: tuple[str, ...] = ()
    kind: Literal[RowOutcomeKind.UPDATED] = RowOutcomeKind.UPDATED


@dataclass(frozen=True, slots=True, kw_only=True)
class RowSkipped:
    """Row deliberately not written; blank rows carry no warnings."""

    row_number: int
    warnings: tuple[str, ...] = ()
    kind: Literal[RowOutcomeKind.SKIPPED] = RowOutcomeKind.SKIPPED


@dataclass(frozen=True, slots=True, kw_only=True)
class RowFailed:
    row_number: int
    errors: tuple[str, ...]
    warnings: tuple[str, ...] = ()
    kind: Literal[RowOutcomeKind.FAILED] = RowOutcomeKind.FAILED

    def __post_init__(self) -> None:
        if not self.errors:
            raise ValueError("A failed row must carry at least one error")


type RowOutcome = RowImported | RowUpdated | RowSkipped | RowFailed


@dataclass(frozen=True, slots=True)
class RowDiagnostic:
    row_number: int
    message: str


@dataclass(slots=True, kw_only=True)
class ImportReport:
    """Counters and ordered diagnostics for one batch.

    ``success`` holds when at least one row did not fail.
    """

    total: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[RowDiagnostic] = field(default_factory=list[RowDiagnostic])
    warnings: list[RowDiagnostic] = field(default_factory=list[RowDiagnostic])
    aborted: bool = False

    @property
    def success(self) -> bool:
        return self.failed < self.total

    @classmethod
    def from_outcomes(cls, total: int, outcomes: Iterable[RowOutcome]) -> ImportReport:
        report = cls(total=total)
        for outcome in sorted(outcomes, key=lambda item: item.row_number):
            report.record(outcome)
        return report

    @classmethod
    def aborted_batch(cls, total: int, message: str) -> ImportReport:
        """Report for a rolled-back batch: nothing persisted, one batch-level diagnostic."""

        return cls(
            total=total,
            failed=total,
            errors=[RowDiagnostic(row_number=0, message=message)],
            aborted=True,
        )

    def record(self, outcome: RowOutcome) -> None:
        match outcome:
            case RowImported():
                self.imported += 1
            case RowUpdated():
                self.updated += 1
            case RowSkipped():
                self.skipped += 1
            case RowFailed(errors=errors):
                self.failed += 1
                self.errors.extend(RowDiagnostic(outcome.row_number, message) for message in errors)
        self.warnings.extend(
            RowDiagnostic(outcome.row_number, message) for message in outcome.warnings
        )

    def summary(self) -> str:
        return (
            f"total={self.total}, imported={self.imported}, updated={self.updated}, "
            f"skipped={self.skipped}, failed={self.failed}"
        )


class BatchStatus(StrEnum):
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchCompleted:
    """The batch ran to the end; a ``dry_run`` batch was rolled back regardless."""

    report: ImportReport
    dry_run: bool = False
    status: Literal[BatchStatus.COMPLETED] = BatchStatus.COMPLETED


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchAborted:
    """The batch transaction was rolled back; ``report`` lists no successes."""

    report: ImportReport
    reason: str
    status: Literal[BatchStatus.ABORTED] = BatchStatus.ABORTED


type BatchOutcome = BatchCompleted | BatchAborted


__all__ = [
    "BatchAborted",
    "BatchCompleted",
    "BatchOutcome",
    "BatchStatus",
    "ImportReport",
    "RowDiagnostic",
    "RowFailed",
    "RowImported",
    "RowOutcome",
    "RowOutcomeKind",
    "RowSkipped",
    "RowUpdated",
]
