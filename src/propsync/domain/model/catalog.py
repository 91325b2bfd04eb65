"""Catalog entities: destinations, properties and their pricing/cost records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, ClassVar

from .entity import Entity
from .enums import CostType, EntityType, PriceType, PropertyStatus

if TYPE_CHECKING:
    from uuid import UUID


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class Destination(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.DESTINATION

    name: str
    country: str = "Unknown"


@dataclass(eq=False, kw_only=True)
class Property(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PROPERTY

    name: str
    destination_id: UUID | None = None
    status: PropertyStatus = PropertyStatus.PUBLISHED
    number_of_rooms: int | None = None
    number_of_bathrooms: int | None = None
    max_guests: int | None = None
    address: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    segment: str | None = None
    categories: list[str] = field(default_factory=list[str])
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(eq=False, kw_only=True)
class PriceRange(Entity):
    """Owner pricing for one period of a property."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PRICE_RANGE

    property_id: UUID
    name: str
    start_date: date
    end_date: date
    owner_nightly_rate: float | None = None
    owner_weekly_rate: float | None = None
    is_validated: bool = False


@dataclass(eq=False, kw_only=True)
class OperationalCost(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.OPERATIONAL_COST

    property_id: UUID
    cost_type: CostType = CostType.HOUSEKEEPING
    estimated_price: float | None = None
    price_type: PriceType = PriceType.PER_STAY
