"""JSON schema of import reports as printed by the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from propsync.domain.importing import BatchCompleted

if TYPE_CHECKING:
    from propsync.domain.importing import BatchOutcome, ImportReport


class RowDiagnosticModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    row: int = Field(ge=0)
    message: str


class ImportReportModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: str
    success: bool
    total: int = Field(ge=0)
    imported: int = Field(ge=0)
    updated: int = Field(ge=0)
    skipped: int = Field(ge=0)
    failed: int = Field(ge=0)
    errors: list[RowDiagnosticModel] = Field(default_factory=list[RowDiagnosticModel])
    warnings: list[RowDiagnosticModel] = Field(default_factory=list[RowDiagnosticModel])

    @classmethod
    def from_report(cls, report: ImportReport, *, status: str = "completed") -> ImportReportModel:
        return cls(
            status=status,
            success=report.success,
            total=report.total,
            imported=report.imported,
            updated=report.updated,
            skipped=report.skipped,
            failed=report.failed,
            errors=[
                RowDiagnosticModel(row=item.row_number, message=item.message)
                for item in report.errors
            ],
            warnings=[
                RowDiagnosticModel(row=item.row_number, message=item.message)
                for item in report.warnings
            ],
        )

    @classmethod
    def from_outcome(cls, outcome: BatchOutcome) -> ImportReportModel:
        status = outcome.status.value
        if isinstance(outcome, BatchCompleted) and outcome.dry_run:
            status = "dry_run"
        return cls.from_report(outcome.report, status=status)
