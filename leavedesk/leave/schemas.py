"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out / *Result      → response bodies (read)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leavedesk.actors.schemas import ActorBrief
from leavedesk.common.constants import LeaveCategory, LeaveStatus


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for submitting a leave request.

    The ``start_date < end_date`` rule is enforced by the service so that it
    is reported against ``end_date`` for every caller.
    """

    category: LeaveCategory
    start_date: date = Field(..., description="Leave start date")
    end_date: date = Field(..., description="Leave end date, strictly after start_date")
    reason: str = Field(..., min_length=1, max_length=2000)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("reason must not be blank.")
        return v


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    """Full leave request response with both review stages."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    requester_id: uuid.UUID
    category: LeaveCategory
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus

    first_comment: Optional[str] = None
    first_reviewed_at: Optional[datetime] = None
    first_reviewed_by: Optional[uuid.UUID] = None
    final_comment: Optional[str] = None
    final_reviewed_at: Optional[datetime] = None
    final_reviewed_by: Optional[uuid.UUID] = None
    is_system_decision: bool = False

    created_at: datetime
    updated_at: datetime

    # Enriched by service
    requester: Optional[ActorBrief] = None
    first_reviewer: Optional[ActorBrief] = None
    final_reviewer: Optional[ActorBrief] = None


class ConflictingEventOut(BaseModel):
    """Restricted calendar event that overlaps a submitted leave."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    start_date: date
    end_date: date
    event_type: str


class LeaveDecisionOut(BaseModel):
    """Outcome of the calendar check performed at submission."""

    auto_rejected: bool = False
    message: str
    system_note: Optional[str] = None
    conflicting_events: list[ConflictingEventOut] = Field(default_factory=list)


class LeaveApplicationResult(BaseModel):
    request: LeaveRequestOut
    decision: LeaveDecisionOut


# ═════════════════════════════════════════════════════════════════════
# Leave Review
# ═════════════════════════════════════════════════════════════════════


class LeaveReviewRequest(BaseModel):
    """Payload for approving or rejecting at the reviewer's stage."""

    approved: bool
    comment: str = Field(..., min_length=1, max_length=1000)

    @field_validator("comment")
    @classmethod
    def comment_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("comment must not be blank.")
        return v


# ═════════════════════════════════════════════════════════════════════
# History
# ═════════════════════════════════════════════════════════════════════


class AuditEntryOut(BaseModel):
    """One audit entry; ``actor_id`` is null for system decisions."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    action: str
    actor_id: Optional[uuid.UUID] = None
    is_system: bool = False
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    created_at: datetime
