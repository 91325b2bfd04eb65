"""
Base building blocks:
identity, entity_type discriminator, audit snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from propsync.domain.model.enums import EntityType


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE


type SnapshotValue = str | int | float | bool | None | list[SnapshotValue]
type Snapshot = dict[str, SnapshotValue]


def snapshot(entity: Entity) -> Snapshot:
    """Return a JSON-compatible copy of the entity's dataclass fields."""

    return {item.name: _snapshot_value(getattr(entity, item.name)) for item in fields(entity)}


def _snapshot_value(value: object) -> SnapshotValue:
    if value is None or isinstance(value, (bool, int, float, str)):
        if isinstance(value, Enum):
            return value.value
        return value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return _snapshot_value(value.value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_snapshot_value(item) for item in value]
    return str(value)
