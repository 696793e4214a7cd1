"""Append-only audit trail for leave requests, calendar events and actors.

Each service writes one entry per change in the same transaction as the
change itself. Entries with no ``actor_id`` are decisions taken by the
system (calendar-conflict auto-rejections).
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, select
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from leavedesk.database import Base


class AuditAction(str, enum.Enum):
    create = "create"
    auto_reject = "auto_reject"
    approve = "approve"
    reject = "reject"
    delete = "delete"
    update_section = "update_section"


class AuditEntity(str, enum.Enum):
    leave_request = "leave_request"
    calendar_event = "calendar_event"
    actor = "actor"


class AuditTrail(Base):
    __tablename__ = "audit_trail"
    __table_args__ = (
        Index("ix_audit_trail_actor_id", "actor_id"),
        Index("ix_audit_trail_entity", "entity_type", "entity_id"),
        Index("ix_audit_trail_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("actors.id"), nullable=True,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    old_values = Column(JSONB, nullable=True)
    new_values = Column(JSONB, nullable=True)
    # Set client-side and strictly increasing per session; see _next_timestamp.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    @property
    def is_system(self) -> bool:
        return self.actor_id is None

    def __repr__(self) -> str:
        who = "system" if self.is_system else self.actor_id
        return f"<AuditTrail {self.action} {self.entity_type}/{self.entity_id} by {who}>"


_LAST_STAMP_KEY = "audit_last_created_at"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_timestamp(session: AsyncSession) -> datetime:
    # Entries written back to back can share a clock reading; bump by 1us so
    # history order matches write order.
    now = _utcnow()
    last = session.info.get(_LAST_STAMP_KEY)
    if last is not None and now <= last:
        now = last + timedelta(microseconds=1)
    session.info[_LAST_STAMP_KEY] = now
    return now


async def create_audit_entry(
    session: AsyncSession,
    *,
    action: AuditAction | str,
    entity_type: AuditEntity | str,
    entity_id: uuid.UUID,
    actor_id: Optional[uuid.UUID] = None,
    old_values: Optional[dict[str, Any]] = None,
    new_values: Optional[dict[str, Any]] = None,
) -> AuditTrail:
    """Add and flush one entry. ``actor_id=None`` marks a system decision.

    Raises:
        ValueError: unknown action or entity type.
    """
    entry = AuditTrail(
        id=uuid.uuid4(),
        actor_id=actor_id,
        action=AuditAction(action).value,
        entity_type=AuditEntity(entity_type).value,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
        created_at=_next_timestamp(session),
    )
    session.add(entry)
    await session.flush()
    return entry


async def entity_history(
    session: AsyncSession,
    entity_type: AuditEntity,
    entity_id: uuid.UUID,
) -> list[AuditTrail]:
    """All entries for one entity, oldest first."""
    result = await session.execute(
        select(AuditTrail)
        .where(
            AuditTrail.entity_type == entity_type.value,
            AuditTrail.entity_id == entity_id,
        )
        .order_by(AuditTrail.created_at)
    )
    return list(result.scalars().all())
