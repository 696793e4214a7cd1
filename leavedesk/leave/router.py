"""Leave router — submit, list, get, review.

All endpoints require authentication. Role checks live in the service so the
same rules apply to every caller.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.actors.models import Actor
from leavedesk.auth.dependencies import get_current_actor
from leavedesk.common.constants import LeaveStatus
from leavedesk.common.exceptions import ValidationException
from leavedesk.common.rate_limit import actor_or_address, limiter
from leavedesk.config import settings
from leavedesk.database import get_db
from leavedesk.leave.schemas import (
    AuditEntryOut,
    LeaveApplicationResult,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveReviewRequest,
)
from leavedesk.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


def _parse_statuses(raw: Optional[str]) -> Optional[list[LeaveStatus]]:
    """Split ``a,b,c`` into statuses; blank means "use the role default"."""
    if not raw:
        return None
    statuses: list[LeaveStatus] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            statuses.append(LeaveStatus(part))
        except ValueError:
            raise ValidationException({"status": [f"Unknown status '{part}'."]})
    return statuses or None


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveApplicationResult, status_code=201)
@limiter.limit(settings.CREATE_RATE_LIMIT, key_func=actor_or_address)
async def create_leave_request(
    request: Request,
    body: LeaveRequestCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request. May come back already auto-rejected."""
    return await LeaveService.create_leave_request(db, actor, body)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[LeaveRequestOut])
async def list_leave_requests(
    status: Optional[str] = Query(
        None, description="Comma-separated statuses; replaces the reviewer default",
    ),
    requester_id: Optional[uuid.UUID] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Requesters get their own history; reviewers get their stage by default."""
    return await LeaveService.list_leave_requests(
        db,
        actor,
        statuses=_parse_statuses(status),
        requester_id=requester_id,
    )


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{request_id}", response_model=LeaveRequestOut)
async def get_leave_request(
    request_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_leave_request(db, actor, request_id)


# ── POST /{id}/review ───────────────────────────────────────────────

@router.post("/{request_id}/review", response_model=LeaveRequestOut)
async def review_leave_request(
    request_id: uuid.UUID,
    body: LeaveReviewRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject at the caller's stage (advisor, then HOD)."""
    return await LeaveService.review_leave_request(
        db, actor, request_id, body.approved, body.comment,
    )


# ── GET /{id}/history ───────────────────────────────────────────────

@router.get("/{request_id}/history", response_model=list[AuditEntryOut])
async def get_leave_history(
    request_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Submission, auto-rejection and review entries, oldest first."""
    return await LeaveService.get_leave_history(db, actor, request_id)
