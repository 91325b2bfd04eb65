"""Contact rows: identity by email, optional links to existing properties."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field

from propsync.domain.importing.context import ImportMode
from propsync.domain.importing.handlers.base import failed, validate_or_fail
from propsync.domain.importing.report import RowFailed, RowImported, RowSkipped, RowUpdated
from propsync.domain.importing.resolve import UnresolvedReference
from propsync.domain.importing.schema import (
    CONTACT_CATEGORY,
    CONTACT_RELATIONSHIP,
    CommaList,
    Email,
    EnumMapping,
    RowModel,
    columns,
)
from propsync.domain.model import (
    Contact,
    ContactCategory,
    ContactPropertyLink,
    ContactPropertyRelationship,
    EntityType,
)

if TYPE_CHECKING:
    from uuid import UUID

    from propsync.domain.importing.handlers.base import RowServices
    from propsync.domain.importing.report import RowOutcome
    from propsync.domain.importing.rows import RawRow
    from propsync.domain.model import Property


class ContactRow(RowModel):
    entity_name: ClassVar[str] = "contact"
    required_messages: ClassVar[Mapping[str, str]] = {
        "first_name": "First name is required",
        "last_name": "Last name is required",
    }
    enum_fields: ClassVar[Mapping[str, EnumMapping[Any]]] = {
        "category": CONTACT_CATEGORY,
        "relationship": CONTACT_RELATIONSHIP,
    }

    first_name: str = Field(validation_alias="firstName")
    last_name: str = Field(validation_alias="lastName")
    email: Email | None = None
    phone: str | None = None
    category: ContactCategory = CONTACT_CATEGORY.default
    language: str = "English"
    comments: str | None = None
    linked_properties: CommaList = Field(
        default_factory=list[str], validation_alias=columns("linkedProperties", "properties")
    )
    relationship: ContactPropertyRelationship = CONTACT_RELATIONSHIP.default


_LINK_KEYS = ("linked_properties", "relationship")


class ContactRowHandler:
    """Create or update contacts keyed by email.

    Every linked property must resolve; otherwise the row fails and no
    contact is written. With ``skip_duplicates`` an existing email in
    ``create`` mode skips the row with a warning instead of failing it.
    """

    entity_type = EntityType.CONTACT

    def __init__(self, *, skip_duplicates: bool = False) -> None:
        self.skip_duplicates = skip_duplicates

    async def handle(self, row: RawRow, services: RowServices, warnings: list[str]) -> RowOutcome:
        record = validate_or_fail(row, ContactRow, warnings)
        if isinstance(record, RowFailed):
            return record
        contact_row = record.data
        context = services.context
        email = contact_row.email

        linked: dict[UUID, Property] = {}
        errors: list[str] = []
        for reference in contact_row.linked_properties:
            resolution = services.resolver.resolve_property(reference)
            if isinstance(resolution, UnresolvedReference):
                errors.append(resolution.message)
            else:
                linked.setdefault(resolution.entity_id, resolution.entity)
        if errors:
            return failed(row, warnings, *errors)

        created: Contact | None = None
        async with services.writer.scope():
            existing = context.contacts_by_email.get(email) if email else None
            if existing is not None and context.mode is ImportMode.CREATE:
                message = f'Contact with email "{email}" already exists'
                if self.skip_duplicates:
                    warnings.append(f"{message}, skipped")
                    return RowSkipped(row_number=row.row_number, warnings=tuple(warnings))
                return failed(row, warnings, message)
            if existing is None and context.mode is ImportMode.UPDATE:
                if not email:
                    return failed(row, warnings, "Email is required to update a contact")
                return failed(row, warnings, f'Contact with email "{email}" not found')

            if existing is None:
                created = Contact(
                    first_name=contact_row.first_name,
                    last_name=contact_row.last_name,
                    email=email,
                    phone=contact_row.phone,
                    category=contact_row.category,
                    language=contact_row.language,
                    comments=contact_row.comments,
                )
                contact = await services.writer.create(created)
                already_linked: set[UUID] = set()
            else:
                contact = await services.writer.update(existing, record.changes(*_LINK_KEYS))
                links = await services.writer.repositories.contact_links.list_for_contact(contact.id)
                already_linked = {link.property_id for link in links}

                        for prop in linked.values():
                if prop.id in already_linked:
                    continue
                await services.writer.create(
                    ContactPropertyLink(
                        contact_id=contact.id,
                        property_id=prop.id,
                        relationship=contact_row.relationship,
                    )
                )

        if created is not None:
            context.register_contact(created)
            return RowImported(row_number=row.row_number, entity_id=contact.id, warnings=tuple(warnings))
        return RowUpdated(row_number=row.row_number, entity_id=contact.id, warnings=tuple(warnings))


__all__ = ["ContactRow", "ContactRowHandler"]
