"""Leave service layer — submission, two-stage review, scoped reads.

Business logic:
  - Submission runs the calendar conflict detector first; its verdict picks
    the initial status (``pending_first`` or a system ``first_rejected``)
  - Reviews resolve through the state machine, then persist with a
    compare-and-set on ``status`` so two racing reviewers cannot both win
  - Reads go through the role-scoped visibility filter
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.academic_calendar.service import CalendarService
from leavedesk.actors.models import Actor
from leavedesk.common.audit import (
    AuditAction,
    AuditEntity,
    create_audit_entry,
    entity_history,
)
from leavedesk.common.constants import ActorRole, LeaveStatus, ReviewStage
from leavedesk.common.exceptions import (
    ForbiddenException,
    NotFoundException,
    StateException,
    ValidationException,
)
from leavedesk.leave.conflicts import AutoRejected, append_advisory, detect_conflicts
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.schemas import (
    AuditEntryOut,
    ConflictingEventOut,
    LeaveApplicationResult,
    LeaveDecisionOut,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from leavedesk.leave.visibility import leave_request_scope
from leavedesk.leave.workflow import (
    Transition,
    resolve_transition,
    stage_source_for,
)

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: submit, review, list, get."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _request_query() -> Select:
        return select(LeaveRequest).options(
            selectinload(LeaveRequest.requester),
            selectinload(LeaveRequest.first_reviewer),
            selectinload(LeaveRequest.final_reviewer),
        )

    @staticmethod
    async def _load_request(
        db: AsyncSession,
        request_id: uuid.UUID,
    ) -> LeaveRequest:
        """Load a request with reviewers, bypassing any stale identity-map copy."""
        result = await db.execute(
            LeaveService._request_query()
            .where(LeaveRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        leave_req = result.scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_req

    @staticmethod
    def _build_request_response(req: LeaveRequest) -> LeaveRequestOut:
        return LeaveRequestOut.model_validate(req)

    @staticmethod
    def _stage_values(
        stage: ReviewStage,
        reviewer_id: uuid.UUID,
        comment: str,
        now: datetime,
    ) -> dict:
        if stage == ReviewStage.first_line:
            return {
                "first_comment": comment,
                "first_reviewed_at": now,
                "first_reviewed_by": reviewer_id,
            }
        return {
            "final_comment": comment,
            "final_reviewed_at": now,
            "final_reviewed_by": reviewer_id,
        }

    @staticmethod
    async def _apply_transition(
        db: AsyncSession,
        request_id: uuid.UUID,
        transition: Transition,
        reviewer: Actor,
        comment: str,
    ) -> None:
        """Persist *transition* only if the row is still in its source status.

        Raises:
            StateException: another review moved the request first.
        """
        now = datetime.now(timezone.utc)
        values = LeaveService._stage_values(transition.stage, reviewer.id, comment, now)

        result = await db.execute(
            update(LeaveRequest)
            .where(
                LeaveRequest.id == request_id,
                LeaveRequest.status == transition.source,
            )
            .values(status=transition.target, updated_at=now, **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        current = (
            await db.execute(
                select(LeaveRequest.status).where(LeaveRequest.id == request_id)
            )
        ).scalar()
        if current is None:
            raise NotFoundException("LeaveRequest", str(request_id))

        logger.warning(
            "Lost review race on leave request %s: %s expected %s, found %s",
            request_id, reviewer.email, transition.source.value, current.value,
        )
        raise StateException(
            action=transition.action,
            current_status=current,
            expected_status=transition.source,
        )

    # ─────────────────────────────────────────────────────────────────
    # Submit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_leave_request(
        db: AsyncSession,
        actor: Actor,
        data: LeaveRequestCreate,
    ) -> LeaveApplicationResult:
        """Submit a leave request and apply the calendar policy:

        - overlaps a restricted event, not medical → stored as first_rejected
          with a system comment and no reviewer
        - overlaps a restricted event, medical → pending_first, advisory note
          appended to the reason
        - no overlap → pending_first
        """
        if actor.role != ActorRole.requester:
            raise ForbiddenException("Only students can create leave applications.")

        # New requests need at least one night: end strictly after start.
        if data.start_date >= data.end_date:
            raise ValidationException(
                {"end_date": ["End date must be after start date."]}
            )

        reason = data.reason.strip()
        if not reason:
            raise ValidationException({"reason": ["Reason is required."]})

        now = datetime.now(timezone.utc)

        candidates = await CalendarService.find_restricted_candidates(
            db, data.start_date, data.end_date,
        )
        verdict = detect_conflicts(
            data.category, data.start_date, data.end_date, candidates,
        )

        leave_req = LeaveRequest(
            id=uuid.uuid4(),
            requester_id=actor.id,
            category=data.category,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=reason,
            status=LeaveStatus.pending_first,
            created_at=now,
            updated_at=now,
        )

        if isinstance(verdict, AutoRejected):
            conflicting = verdict.events
            system_note = None
            leave_req.status = LeaveStatus.first_rejected
            leave_req.first_comment = verdict.comment
            leave_req.first_reviewed_at = now
            leave_req.first_reviewed_by = None
        else:
            conflicting = verdict.advisory_events
            system_note = verdict.note
            leave_req.reason = append_advisory(reason, verdict.note)

        db.add(leave_req)
        await db.flush()

        await create_audit_entry(
            db,
            action=AuditAction.create,
            entity_type=AuditEntity.leave_request,
            entity_id=leave_req.id,
            actor_id=actor.id,
            new_values={
                "category": data.category.value,
                "start_date": data.start_date.isoformat(),
                "end_date": data.end_date.isoformat(),
                "status": LeaveStatus.pending_first.value,
            },
        )

        if isinstance(verdict, AutoRejected):
            await create_audit_entry(
                db,
                action=AuditAction.auto_reject,
                entity_type=AuditEntity.leave_request,
                entity_id=leave_req.id,
                actor_id=None,
                old_values={"status": LeaveStatus.pending_first.value},
                new_values={
                    "status": LeaveStatus.first_rejected.value,
                    "conflicting_events": [e.title for e in conflicting],
                },
            )
            logger.info(
                "Leave request %s by %s auto-rejected: overlaps %s",
                leave_req.id, actor.email, [e.title for e in conflicting],
            )
            message = "Leave application auto-rejected due to academic calendar conflicts"
        else:
            if conflicting:
                logger.info(
                    "Medical leave %s by %s admitted with advisory for %s",
                    leave_req.id, actor.email, [e.title for e in conflicting],
                )
            else:
                logger.info("Leave request %s submitted by %s", leave_req.id, actor.email)
            message = "Leave application created successfully"

        leave_req = await LeaveService._load_request(db, leave_req.id)

        return LeaveApplicationResult(
            request=LeaveService._build_request_response(leave_req),
            decision=LeaveDecisionOut(
                auto_rejected=isinstance(verdict, AutoRejected),
                message=message,
                system_note=system_note,
                conflicting_events=[
                    ConflictingEventOut.model_validate(e) for e in conflicting
                ],
            ),
        )

    # ─────────────────────────────────────────────────────────────────
    # Review
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def review_leave_request(
        db: AsyncSession,
        actor: Actor,
        request_id: uuid.UUID,
        approve: bool,
        comment: Optional[str],
    ) -> LeaveRequestOut:
        """Approve or reject at the actor's stage.

        Advisors act on ``pending_first``; HODs act on ``first_approved``.
        Anything else is a permission or state error; nothing is applied twice.
        """
        comment = (comment or "").strip()
        if not comment:
            raise ValidationException({"comment": ["Comment is required."]})

        stage_source_for(actor.role)

        leave_req = await LeaveService._load_request(db, request_id)
        old_status = leave_req.status

        try:
            transition = resolve_transition(actor.role, old_status, approve)
        except StateException:
            logger.warning(
                "Rejected %s by %s on leave request %s in status %s",
                "approve" if approve else "reject",
                actor.email, request_id, old_status.value,
            )
            raise

        await LeaveService._apply_transition(db, request_id, transition, actor, comment)

        await create_audit_entry(
            db,
            action=transition.action,
            entity_type=AuditEntity.leave_request,
            entity_id=request_id,
            actor_id=actor.id,
            old_values={"status": transition.source.value},
            new_values={
                "status": transition.target.value,
                "stage": transition.stage.value,
                "comment": comment,
            },
        )

        logger.info(
            "Leave request %s: %s → %s by %s",
            request_id, transition.source.value, transition.target.value, actor.email,
        )

        leave_req = await LeaveService._load_request(db, request_id)
        return LeaveService._build_request_response(leave_req)

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_leave_requests(
        db: AsyncSession,
        actor: Actor,
        *,
        statuses: Optional[Iterable[LeaveStatus]] = None,
        requester_id: Optional[uuid.UUID] = None,
    ) -> list[LeaveRequestOut]:
        """Requests visible to *actor*, newest first."""
        scope = leave_request_scope(actor, statuses, requester_id)
        query = scope.apply(LeaveService._request_query()).order_by(
            LeaveRequest.created_at.desc()
        )
        result = await db.execute(query)
        return [
            LeaveService._build_request_response(r) for r in result.scalars().all()
        ]

    @staticmethod
    async def _load_visible(
        db: AsyncSession,
        actor: Actor,
        request_id: uuid.UUID,
    ) -> LeaveRequest:
        leave_req = await LeaveService._load_request(db, request_id)
        if not leave_request_scope(actor).matches(leave_req):
            raise ForbiddenException("You do not have access to this leave request.")
        return leave_req

    @staticmethod
    async def get_leave_request(
        db: AsyncSession,
        actor: Actor,
        request_id: uuid.UUID,
    ) -> LeaveRequestOut:
        """Single request, subject to the actor's default visibility."""
        leave_req = await LeaveService._load_visible(db, actor, request_id)
        return LeaveService._build_request_response(leave_req)

    @staticmethod
    async def get_leave_history(
        db: AsyncSession,
        actor: Actor,
        request_id: uuid.UUID,
    ) -> list[AuditEntryOut]:
        """Audit entries for one request, oldest first. Same visibility as a read."""
        await LeaveService._load_visible(db, actor, request_id)
        entries = await entity_history(db, AuditEntity.leave_request, request_id)
        return [AuditEntryOut.model_validate(e) for e in entries]
