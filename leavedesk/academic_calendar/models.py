"""Academic calendar ORM model: CalendarEvent."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import RESTRICTED_EVENT_TYPES
from leavedesk.database import Base

if TYPE_CHECKING:
    from leavedesk.actors.models import Actor


class CalendarEvent(Base):
    """Named inclusive date range; restricted types block non-medical leave."""

    __tablename__ = "calendar_events"
    __table_args__ = (
        sa.Index("idx_cal_event_start", "start_date"),
        sa.Index("idx_cal_event_end", "end_date"),
        sa.Index("idx_cal_event_type", "event_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    event_type: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("actors.id")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    creator: Mapped[Optional["Actor"]] = relationship(foreign_keys=[created_by])

    @property
    def is_restricted(self) -> bool:
        return self.event_type in RESTRICTED_EVENT_TYPES

    def __repr__(self) -> str:
        return f"<CalendarEvent {self.title!r} {self.start_date}..{self.end_date}>"
