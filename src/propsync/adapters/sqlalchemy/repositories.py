"""Repository implementations backed by async SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from propsync.adapters.sqlalchemy.mappings import (
    audit_log_table,
    booking_table,
    contact_property_table,
    contact_table,
)
from propsync.domain.model import (
    AuditLogEntry,
    AvailabilityRequest,
    Booking,
    BookingStatus,
    Contact,
    ContactPropertyLink,
    Destination,
    OperationalCost,
    PriceRange,
    Property,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Select


class SqlAlchemyRepository[TEntity]:
    """Generic async repository for one imperatively mapped entity class.

    Writes are flushed immediately so constraint violations surface inside
    the row scope that caused them.
    """

    def __init__(self, session: AsyncSession, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    async def add(self, entity: TEntity) -> None:
        self.session.add(entity)
        await self.session.flush()

    async def get(self, entity_id: UUID) -> TEntity | None:
        return await self.session.get(self._entity_cls, entity_id)

    async def list_all(self) -> list[TEntity]:
        return await self._scalars(select(self._entity_cls))

    async def save(self, entity: TEntity) -> None:
        _ = entity
        await self.session.flush()

    async def delete(self, entity: TEntity) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    async def _scalars(self, stmt: Select[tuple[TEntity]]) -> list[TEntity]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SqlAlchemyDestinationRepository(SqlAlchemyRepository[Destination]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Destination)


class SqlAlchemyPropertyRepository(SqlAlchemyRepository[Property]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Property)


class SqlAlchemyPriceRangeRepository(SqlAlchemyRepository[PriceRange]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PriceRange)


class SqlAlchemyOperationalCostRepository(SqlAlchemyRepository[OperationalCost]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, OperationalCost)


class SqlAlchemyAvailabilityRequestRepository(SqlAlchemyRepository[AvailabilityRequest]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AvailabilityRequest)


class SqlAlchemyBookingRepository(SqlAlchemyRepository[Booking]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Booking)

    async def list_active(self, *, property_id: UUID | None = None) -> list[Booking]:
        stmt = select(Booking).where(booking_table.c.status != BookingStatus.CANCELLED)
        if property_id is not None:
            stmt = stmt.where(booking_table.c.property_id == property_id)
        return await self._scalars(stmt.order_by(booking_table.c.start_date))

    async def get_by_external_id(self, external_id: str) -> Booking | None:
        stmt = select(Booking).where(booking_table.c.external_id == external_id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class SqlAlchemyContactRepository(SqlAlchemyRepository[Contact]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Contact)

    async def get_by_email(self, email: str) -> Contact | None:
        stmt = select(Contact).where(contact_table.c.email == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class SqlAlchemyContactPropertyLinkRepository(SqlAlchemyRepository[ContactPropertyLink]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ContactPropertyLink)

    async def list_for_contact(self, contact_id: UUID) -> list[ContactPropertyLink]:
        stmt = select(ContactPropertyLink).where(contact_property_table.c.contact_id == contact_id)
        return await self._scalars(stmt)


class SqlAlchemyAuditLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, entry: AuditLogEntry) -> None:
        self.session.add(entry)

    async def list_all(self) -> list[AuditLogEntry]:
        stmt = select(AuditLogEntry).order_by(audit_log_table.c.created_at)
        result = await self.session.execute(stmt)
        return cast("list[AuditLogEntry]", list(result.scalars().all()))
