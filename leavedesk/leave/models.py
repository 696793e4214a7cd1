"""Leave ORM model: LeaveRequest with per-stage review fields."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import LeaveCategory, LeaveStatus
from leavedesk.database import Base

if TYPE_CHECKING:
    from leavedesk.actors.models import Actor


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.Index("idx_leave_req_requester", "requester_id"),
        sa.Index("idx_leave_req_status", "status"),
        sa.Index("idx_leave_req_created", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    requester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("actors.id"), nullable=False
    )
    category: Mapped[LeaveCategory] = mapped_column(
        sa.Enum(LeaveCategory, name="leave_category"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        nullable=False,
        server_default=LeaveStatus.pending_first.value,
    )

    # First-line (advisor) stage; reviewer NULL means a system decision
    first_comment: Mapped[Optional[str]] = mapped_column(sa.Text)
    first_reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    first_reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("actors.id")
    )

    # Final (HOD) stage
    final_comment: Mapped[Optional[str]] = mapped_column(sa.Text)
    final_reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    final_reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("actors.id")
    )

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    # Relationships
    requester: Mapped["Actor"] = relationship(
        back_populates="leave_requests", foreign_keys=[requester_id]
    )
    first_reviewer: Mapped[Optional["Actor"]] = relationship(
        foreign_keys=[first_reviewed_by]
    )
    final_reviewer: Mapped[Optional["Actor"]] = relationship(
        foreign_keys=[final_reviewed_by]
    )

    @property
    def is_system_decision(self) -> bool:
        """First stage was decided by the calendar check, not by a person."""
        return (
            self.status == LeaveStatus.first_rejected
            and self.first_reviewed_by is None
            and self.first_reviewed_at is not None
        )
