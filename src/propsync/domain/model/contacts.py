"""Contacts and their links to properties."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from .entity import Entity
from .enums import ContactCategory, ContactPropertyRelationship, EntityType

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Contact(Entity):
    """Global contact; unique by email when one is present."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CONTACT

    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    category: ContactCategory = ContactCategory.OTHER
    language: str = "English"
    comments: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(eq=False, kw_only=True)
class ContactPropertyLink(Entity):
    """Association row; removed by the store when either side is deleted."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CONTACT_PROPERTY

    contact_id: UUID
    property_id: UUID
    relationship: ContactPropertyRelationship = ContactPropertyRelationship.OTHER
