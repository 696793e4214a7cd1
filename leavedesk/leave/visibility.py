"""Role-scoped visibility for leave requests and user listings.

The builders here are pure functions of the acting user and the caller's
filters. Each returns a frozen scope that can be checked against a loaded
row (``matches``) or turned into SQL criteria (``apply``), so list queries
and single-row reads use the same rules.

Leave requests:
  - requester → only their own requests, every status; filters ignored
  - first-line reviewer → statuses default to the advisor stage
  - final reviewer → statuses default to the HOD stage
An explicit status list *replaces* the reviewer default. It is not checked
against it, so a reviewer may ask for statuses outside their stage.

Users:
  - requester → not allowed
  - first-line reviewer → same department AND section, requesters by default
  - final reviewer → same department, any role unless filtered
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from sqlalchemy import Select

from leavedesk.actors.models import Actor
from leavedesk.common.constants import ActorRole, LeaveStatus
from leavedesk.common.exceptions import ForbiddenException
from leavedesk.leave.models import LeaveRequest

DEFAULT_REVIEWER_STATUSES: dict[ActorRole, frozenset[LeaveStatus]] = {
    ActorRole.first_line_reviewer: frozenset(
        {
            LeaveStatus.pending_first,
            LeaveStatus.first_approved,
            LeaveStatus.first_rejected,
        }
    ),
    ActorRole.final_reviewer: frozenset(
        {
            LeaveStatus.first_approved,
            LeaveStatus.final_approved,
            LeaveStatus.final_rejected,
        }
    ),
}


# ── Leave requests ──────────────────────────────────────────────────

@dataclass(frozen=True)
class LeaveRequestScope:
    requester_id: Optional[uuid.UUID] = None
    statuses: Optional[frozenset[LeaveStatus]] = None

    def matches(self, request: Any) -> bool:
        if self.requester_id is not None and request.requester_id != self.requester_id:
            return False
        if self.statuses is not None and request.status not in self.statuses:
            return False
        return True

    def apply(self, query: Select) -> Select:
        if self.requester_id is not None:
            query = query.where(LeaveRequest.requester_id == self.requester_id)
        if self.statuses is not None:
            query = query.where(LeaveRequest.status.in_(sorted(self.statuses)))
        return query


def leave_request_scope(
    actor: Actor,
    statuses: Optional[Iterable[LeaveStatus]] = None,
    requester_id: Optional[uuid.UUID] = None,
) -> LeaveRequestScope:
    if actor.role == ActorRole.requester:
        return LeaveRequestScope(requester_id=actor.id)

    requested = frozenset(statuses) if statuses else None
    return LeaveRequestScope(
        requester_id=requester_id,
        statuses=requested or DEFAULT_REVIEWER_STATUSES[actor.role],
    )


# ── Users ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ActorScope:
    department: Optional[str]
    role: Optional[ActorRole] = None
    match_section: bool = False
    section: Optional[str] = None

    def matches(self, other: Any) -> bool:
        if other.department != self.department:
            return False
        if self.match_section and other.section != self.section:
            return False
        if self.role is not None and other.role != self.role:
            return False
        return True

    def apply(self, query: Select) -> Select:
        # ``== None`` renders IS NULL, matching reviewers with no department/section.
        query = query.where(Actor.department == self.department)
        if self.match_section:
            query = query.where(Actor.section == self.section)
        if self.role is not None:
            query = query.where(Actor.role == self.role)
        return query


def actor_scope(actor: Actor, role: Optional[ActorRole] = None) -> ActorScope:
    if actor.role == ActorRole.first_line_reviewer:
        return ActorScope(
            department=actor.department,
            role=role or ActorRole.requester,
            match_section=True,
            section=actor.section,
        )
    if actor.role == ActorRole.final_reviewer:
        return ActorScope(department=actor.department, role=role)
    raise ForbiddenException("Only reviewers can list users.")
