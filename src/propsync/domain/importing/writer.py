"""The persistence boundary: entity mutations paired with audit entries."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from propsync.domain.model import AuditAction, AuditLogEntry, EntityType, snapshot

if TYPE_CHECKING:
    from collections.abc import Mapping
    from contextlib import AbstractAsyncContextManager

    from propsync.domain.importing.report import ImportReport
    from propsync.domain.model import Entity
    from propsync.domain.ports import ImportRepositories, ImportUnitOfWork, Repository


log = getLogger(__name__)


_REPOSITORY_BY_TYPE: dict[EntityType, str] = {
    EntityType.DESTINATION: "destinations",
    EntityType.PROPERTY: "properties",
    EntityType.PRICE_RANGE: "price_ranges",
    EntityType.OPERATIONAL_COST: "operational_costs",
    EntityType.BOOKING: "bookings",
    EntityType.AVAILABILITY_REQUEST: "availability_requests",
    EntityType.CONTACT: "contacts",
    EntityType.CONTACT_PROPERTY: "contact_links",
}


def _label(entity: Entity) -> str:
    for attribute in ("name", "display_name", "guest_name"):
        value = getattr(entity, attribute, None)
        if value:
            return str(value)
    return str(entity.id)


class EntityWriter:
    """Sole mutator of canonical entities.

    Each mutation emits one audit entry in the same transaction. No business
    validation happens here; link cleanup on delete is left to the store's
    referential integrity rules.
    """

    def __init__(self, unit_of_work: ImportUnitOfWork, *, actor_id: str) -> None:
        self._uow = unit_of_work
        self.actor_id = actor_id

    @property
    def repositories(self) -> ImportRepositories:
        return self._uow.repositories

    def scope(self) -> AbstractAsyncContextManager[None]:
        """Savepoint scope for one row's writes."""

        return self._uow.row_scope()

    def _repository_for(self, entity: Entity) -> Repository[Any]:
        return getattr(self.repositories, _REPOSITORY_BY_TYPE[entity.entity_type])

    async def create[T: Entity](self, entity: T, *, summary: str | None = None) -> T:
        await self._repository_for(entity).add(entity)
        await self._audit(
            AuditAction.CREATE,
            entity,
            summary or f"Created {entity.entity_type.value} {_label(entity)}",
            after=snapshot(entity),
        )
        return entity

    async def update[T: Entity](
        self,
        entity: T,
        changes: Mapping[str, object],
        *,
        summary: str | None = None,
    ) -> T:
        before = snapshot(entity)
        for attribute, value in changes.items():
            if not hasattr(entity, attribute):
                raise AttributeError(f"{type(entity).__name__} has no attribute {attribute!r}")
            setattr(entity, attribute, value)
        await self._repository_for(entity).save(entity)
        await self._audit(
            AuditAction.UPDATE,
            entity,
            summary or f"Updated {entity.entity_type.value} {_label(entity)}",
            before=before,
            after=snapshot(entity),
        )
        return entity

    async def delete(self, entity: Entity, *, summary: str | None = None) -> None:
        before = snapshot(entity)
        await self._repository_for(entity).delete(entity)
        await self._audit(
            AuditAction.DELETE,
            entity,
            summary or f"Deleted {entity.entity_type.value} {_label(entity)}",
            before=before,
        )

    async def record_import(self, entity_type: EntityType, report: ImportReport) -> AuditLogEntry:
        """Append the batch summary entry (``import`` action)."""

        entry = AuditLogEntry(
            action=AuditAction.IMPORT,
            entity_type=entity_type,
            entity_id=str(uuid4()),
            summary=f"Imported {entity_type.value} rows: {report.summary()}",
            user_id=self.actor_id,
            after={
                "total": report.total,
                "imported": report.imported,
                "updated": report.updated,
                "skipped": report.skipped,
                "failed": report.failed,
            },
        )
        await self.repositories.audit_log.add(entry)
        return entry

    async def _audit(
        self,
        action: AuditAction,
        entity: Entity,
        summary: str,
        *,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> None:
        entry = AuditLogEntry(
            action=action,
            entity_type=entity.entity_type,
            entity_id=str(entity.id),
            summary=summary,
            user_id=self.actor_id,
            before=before,
            after=after,
        )
        await self.repositories.audit_log.add(entry)
        log.debug("Audit %s %s %s", action.value, entity.entity_type.value, entity.id)


__all__ = ["EntityWriter"]
