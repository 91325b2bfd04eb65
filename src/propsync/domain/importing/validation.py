"""Pure row validation: a ``RawRow`` checked against a pydantic ``RowModel``.

Validation never raises for malformed input. Problems that block the entity
become field errors; recoverable ones (an unparseable optional number, an
unknown enum value) become warnings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from pydantic import ValidationError

from propsync.domain.importing.schema import RowModel, RowValidationContext

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from propsync.domain.importing.rows import RawRow


_MESSAGES = {
    "iso_date": 'Invalid date for "{column}": "{raw}" (expected YYYY-MM-DD)',
    "email": 'Invalid email for "{column}": "{raw}"',
    "whole_number": '"{column}" must be a whole number, got "{raw}"',
    "date_order": "End date ({end}) must be after start date ({start})",
}


@dataclass(frozen=True, slots=True)
class FieldError:
    column: str
    message: str


@dataclass(slots=True, kw_only=True)
class ValidRecord[M: RowModel]:
    data: M
    warnings: list[str] = field(default_factory=list[str])
    status: Literal["valid"] = "valid"

    def changes(self, *exclude: str) -> dict[str, object]:
        return self.data.changes(*exclude)


@dataclass(slots=True, kw_only=True)
class InvalidRecord:
    errors: list[FieldError]
    warnings: list[str] = field(default_factory=list[str])
    status: Literal["invalid"] = "invalid"

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]


type ValidationResult[M: RowModel] = ValidRecord[M] | InvalidRecord


def validate_row[M: RowModel](row: RawRow, model: type[M]) -> ValidationResult[M]:
    """Validate the non-blank cells of ``row`` into ``model``."""

    data, used = model.read(row)
    context = RowValidationContext(columns=used)
    try:
        parsed = model.model_validate(data, context=context)
    except ValidationError as exc:
        errors = [_field_error(model, used, error) for error in exc.errors()]
        return InvalidRecord(errors=errors, warnings=context.warnings)
    return ValidRecord(data=parsed, warnings=context.warnings)


def _field_error(model: type[RowModel], used: dict[str, str], error: ErrorDetails) -> FieldError:
    ctx = dict(error.get("ctx") or {})
    loc = error["loc"]
    field_name = ctx.get("field") or (model.field_for_column(str(loc[0])) if loc else None)
    if field_name is None:
        return FieldError("", error["msg"])
    column = used.get(field_name) or model.columns_for(field_name)[0]
    if error["type"] == "missing":
        return FieldError(column, model.missing_message(field_name))
    template = _MESSAGES.get(error["type"])
    if template is None:
        return FieldError(column, f'Invalid value for "{column}": {error["msg"]}')
    return FieldError(column, template.format(column=column, **ctx))


__all__ = [
    "FieldError",
    "InvalidRecord",
    "ValidRecord",
    "ValidationResult",
    "validate_row",
]
