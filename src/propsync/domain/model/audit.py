"""Audit trail records written alongside every entity mutation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .entity import Snapshot
    from .enums import AuditAction, EntityType


@dataclass(eq=False, kw_only=True)
class AuditLogEntry:
    """One append-only audit record: who did what to which entity."""

    action: AuditAction
    entity_type: EntityType
    entity_id: str
    summary: str
    user_id: str | None = None
    before: Snapshot | None = None
    after: Snapshot | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
