"""Pydantic row models, cell parsers and named enum mapping tables.

Each importable entity (or sub-entity carried on a property row) is a
``RowModel``. Models are validated from the non-blank cells of a row, keyed
by the column each field was read from; a field lists its accepted columns
in ``validation_alias``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, Self

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from propsync.domain.date_ranges import DateRange, InvalidDateRangeError
from propsync.domain.model import (
    BookingStatus,
    BookingType,
    ContactCategory,
    ContactPropertyRelationship,
    CostType,
    PriceType,
    PropertyStatus,
    RequestUrgency,
)

if TYPE_CHECKING:
    from propsync.domain.importing.rows import RawRow


@dataclass(frozen=True)
class EnumMapping[E: StrEnum]:
    """Case-insensitive lookup table from raw cell text to an enum member.

    ``default`` applies to blank cells, ``fallback`` to unrecognized ones.
    """

    name: str
    values: Mapping[str, E]
    default: E
    fallback: E

    @classmethod
    def of(
        cls,
        name: str,
        enum_cls: type[E],
        *,
        default: E,
        fallback: E | None = None,
        aliases: Mapping[str, E] | None = None,
    ) -> EnumMapping[E]:
        values: dict[str, E] = {member.value.lower(): member for member in enum_cls}
        values.update({member.name.lower(): member for member in enum_cls})
        for alias, member in (aliases or {}).items():
            values[alias.lower()] = member
        return cls(
            name=name,
            values=values,
            default=default,
            fallback=default if fallback is None else fallback,
        )

    def lookup(self, raw: str) -> E | None:
        """Return the mapped member, or ``None`` when ``raw`` is not recognized."""

        key = raw.strip().lower().replace("-", "_").replace(" ", "_")
        return self.values.get(key) or self.values.get(raw.strip().lower())

    def coerce(self, raw: str, warnings: list[str]) -> E:
        member = self.lookup(raw)
        if member is None:
            warnings.append(f'Unknown {self.name} "{raw}", using {self.fallback.value}')
            return self.fallback
        return member


BOOKING_STATUS = EnumMapping.of(
    "booking status",
    BookingStatus,
    default=BookingStatus.CONFIRMED,
    fallback=BookingStatus.PENDING,
)
BOOKING_TYPE = EnumMapping.of("booking type", BookingType, default=BookingType.CONFIRMED)
PROPERTY_STATUS = EnumMapping.of(
    "property status",
    PropertyStatus,
    default=PropertyStatus.PUBLISHED,
    fallback=PropertyStatus.HIDDEN,
)
REQUEST_URGENCY = EnumMapping.of(
    "request urgency",
    RequestUrgency,
    default=RequestUrgency.MEDIUM,
    aliases={"urgent": RequestUrgency.HIGH},
)
CONTACT_CATEGORY = EnumMapping.of("contact category", ContactCategory, default=ContactCategory.OTHER)
CONTACT_RELATIONSHIP = EnumMapping.of(
    "relationship", ContactPropertyRelationship, default=ContactPropertyRelationship.OTHER
)
COST_TYPE = EnumMapping.of("cost type", CostType, default=CostType.HOUSEKEEPING, fallback=CostType.OTHER)
PRICE_TYPE = EnumMapping.of("price type", PriceType, default=PriceType.PER_STAY)


_ISO_DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_EMAIL_SHAPE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_finite_number: TypeAdapter[float] = TypeAdapter(Annotated[float, Field(allow_inf_nan=False)])


def parse_decimal(raw: str) -> float | None:
    """Parse a locale-invariant number; ``None`` for non-numeric or non-finite text."""

    try:
        return _finite_number.validate_python(raw.strip())
    except ValidationError:
        return None


def parse_iso_date(raw: str) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""

    text = raw.strip()
    if not _ISO_DATE_SHAPE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def is_valid_email(raw: str) -> bool:
    return bool(_EMAIL_SHAPE.match(raw.strip()))


def split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(slots=True)
class RowValidationContext:
    """Passed as pydantic validation context; collects non-fatal findings."""

    columns: dict[str, str] = field(default_factory=dict[str, str])
    warnings: list[str] = field(default_factory=list[str])

    def column(self, field_name: str | None) -> str:
        return self.columns.get(field_name or "", field_name or "")


def row_context(info: ValidationInfo) -> RowValidationContext:
    context = info.context
    if isinstance(context, RowValidationContext):
        return context
    return RowValidationContext()


def _iso_date(value: object) -> object:
    if not isinstance(value, str):
        return value
    parsed = parse_iso_date(value)
    if parsed is None:
        raise PydanticCustomError("iso_date", 'Invalid date "{raw}"', {"raw": value})
    return parsed


def _email(value: object) -> object:
    if not isinstance(value, str):
        return value
    if not is_valid_email(value):
        raise PydanticCustomError("email", 'Invalid email "{raw}"', {"raw": value})
    return value.strip().lower()


def _lenient_number(value: object, info: ValidationInfo) -> object:
    if not isinstance(value, str):
        return value
    number = parse_decimal(value)
    if number is None:
        context = row_context(info)
        context.warnings.append(
            f'Invalid number for "{context.column(info.field_name)}": "{value}", ignored'
        )
    return number


def _whole_number(value: object, info: ValidationInfo) -> object:
    number = _lenient_number(value, info)
    if not isinstance(number, float):
        return number
    if not number.is_integer():
        raise PydanticCustomError("whole_number", 'Not a whole number "{raw}"', {"raw": value})
    return int(number)


def _comma_list(value: object) -> object:
    if isinstance(value, str):
        return split_list(value)
    return value


IsoDate = Annotated[date, BeforeValidator(_iso_date)]
Email = Annotated[str, BeforeValidator(_email)]
Number = Annotated[float | None, BeforeValidator(_lenient_number)]
WholeNumber = Annotated[int | None, BeforeValidator(_whole_number)]
CommaList = Annotated[list[str], BeforeValidator(_comma_list)]


def columns(*names: str) -> AliasChoices:
    """Accepted columns of a field, first one canonical."""

    return AliasChoices(*names)


class RowModel(BaseModel):
    """Base of all row models.

    ``markers`` gate optional sub-entities: a model with markers is only
    validated when one of those columns holds a value.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    entity_name: ClassVar[str] = "row"
    markers: ClassVar[tuple[str, ...]] = ()
    required_messages: ClassVar[Mapping[str, str]] = {}
    enum_fields: ClassVar[Mapping[str, EnumMapping[Any]]] = {}
    date_range: ClassVar[tuple[str, str] | None] = None

    @classmethod
    def columns_for(cls, field_name: str) -> tuple[str, ...]:
        alias = cls.model_fields[field_name].validation_alias
        if isinstance(alias, AliasChoices):
            return tuple(choice for choice in alias.choices if isinstance(choice, str))
        if isinstance(alias, str):
            return (alias,)
        return (field_name,)

    @classmethod
    def field_for_column(cls, column: str) -> str | None:
        for name in cls.model_fields:
            if name == column or column in cls.columns_for(name):
                return name
        return None

    @classmethod
    def read(cls, row: RawRow) -> tuple[dict[str, str], dict[str, str]]:
        """Return the non-blank cells keyed by column, and the column used per field."""

        data: dict[str, str] = {}
        used: dict[str, str] = {}
        for name in cls.model_fields:
            for column in cls.columns_for(name):
                value = row.get(column)
                if value:
                    data[column] = value
                    used[name] = column
                    break
        return data, used

    @classmethod
    def is_present(cls, row: RawRow) -> bool:
        return not cls.markers or row.has_any(cls.markers)

    @classmethod
    def missing_message(cls, field_name: str) -> str:
        default = f'"{cls.columns_for(field_name)[0]}" is required'
        return cls.required_messages.get(field_name, default)

    @field_validator("*", mode="before")
    @classmethod
    def _map_enum(cls, value: object, info: ValidationInfo) -> object:
        mapping = cls.enum_fields.get(info.field_name or "")
        if mapping is None or not isinstance(value, str):
            return value
        return mapping.coerce(value, row_context(info).warnings)

    @model_validator(mode="after")
    def _check_date_range(self) -> Self:
        if self.date_range is None:
            return self
        start_name, end_name = self.date_range
        start, end = getattr(self, start_name), getattr(self, end_name)
        if not isinstance(start, date) or not isinstance(end, date):
            return self
        try:
            DateRange(start, end)
        except InvalidDateRangeError as exc:
            raise PydanticCustomError(
                "date_order",
                "End date must be after start date",
                {"start": start.isoformat(), "end": end.isoformat(), "field": end_name},
            ) from exc
        return self

    def changes(self, *exclude: str) -> dict[str, object]:
        """Values read from non-blank cells, minus ``exclude``; ignored numbers are left out."""

        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name in self.model_fields_set
            and name not in exclude
            and getattr(self, name) is not None
        }


__all__ = [
    "BOOKING_STATUS",
    "BOOKING_TYPE",
    "CONTACT_CATEGORY",
    "CONTACT_RELATIONSHIP",
    "COST_TYPE",
    "PRICE_TYPE",
    "PROPERTY_STATUS",
    "REQUEST_URGENCY",
    "CommaList",
    "Email",
    "EnumMapping",
    "IsoDate",
    "Number",
    "RowModel",
    "RowValidationContext",
    "WholeNumber",
    "columns",
    "is_valid_email",
    "parse_decimal",
    "parse_iso_date",
    "row_context",
    "split_list",
]
