"""Two-stage approval state machine for leave requests.

    (create) ──► pending_first ──advisor──► first_approved ──HOD──► final_approved
        │              │                          │
        │              └──advisor──► first_rejected   └──HOD──► final_rejected
        └──calendar conflict (non-medical)──► first_rejected

Every reviewer row of the table is keyed by ``(role, from_status, approve)``.
Resolution only answers *whether* and *where to*; persisting the move with a
compare-and-set on ``status`` is the service's job.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass

from leavedesk.common.constants import (
    REVIEWER_ROLES,
    TERMINAL_STATUSES,
    ActorRole,
    LeaveStatus,
    ReviewStage,
)
from leavedesk.common.exceptions import ForbiddenException, StateException


@dataclass(frozen=True)
class Transition:
    source: LeaveStatus
    target: LeaveStatus
    stage: ReviewStage

    @property
    def action(self) -> str:
        return "approve" if self.target in _APPROVED_TARGETS else "reject"


_APPROVED_TARGETS = {LeaveStatus.first_approved, LeaveStatus.final_approved}

# Status each reviewer role is allowed to act on.
STAGE_SOURCE: dict[ActorRole, LeaveStatus] = {
    ActorRole.first_line_reviewer: LeaveStatus.pending_first,
    ActorRole.final_reviewer: LeaveStatus.first_approved,
}

TRANSITIONS: dict[tuple[ActorRole, LeaveStatus, bool], Transition] = {
    (ActorRole.first_line_reviewer, LeaveStatus.pending_first, True): Transition(
        LeaveStatus.pending_first, LeaveStatus.first_approved, ReviewStage.first_line,
    ),
    (ActorRole.first_line_reviewer, LeaveStatus.pending_first, False): Transition(
        LeaveStatus.pending_first, LeaveStatus.first_rejected, ReviewStage.first_line,
    ),
    (ActorRole.final_reviewer, LeaveStatus.first_approved, True): Transition(
        LeaveStatus.first_approved, LeaveStatus.final_approved, ReviewStage.final,
    ),
    (ActorRole.final_reviewer, LeaveStatus.first_approved, False): Transition(
        LeaveStatus.first_approved, LeaveStatus.final_rejected, ReviewStage.final,
    ),
}


def _check_table() -> None:
    # Every role is either a reviewer with a stage, or cannot review at all.
    for role in ActorRole:
        if (role in REVIEWER_ROLES) != (role in STAGE_SOURCE):
            raise RuntimeError(f"Role {role.value} has no review stage mapping.")
    for role, approve in itertools.product(STAGE_SOURCE, (True, False)):
        if (role, STAGE_SOURCE[role], approve) not in TRANSITIONS:
            raise RuntimeError(f"Missing transition for {role.value} approve={approve}.")
    # Terminal statuses never appear as a source.
    for _, source, _ in TRANSITIONS:
        if source in TERMINAL_STATUSES:
            raise RuntimeError(f"Terminal status {source.value} has an outgoing transition.")


_check_table()


def is_terminal(status: LeaveStatus) -> bool:
    return status in TERMINAL_STATUSES


def stage_source_for(role: ActorRole) -> LeaveStatus:
    """The status *role* reviews from.

    Raises:
        ForbiddenException: the role cannot review leave requests.
    """
    expected = STAGE_SOURCE.get(role)
    if expected is None:
        raise ForbiddenException(
            "Only first-line and final reviewers can review leave requests."
        )
    return expected


def resolve_transition(
    role: ActorRole,
    current: LeaveStatus,
    approve: bool,
) -> Transition:
    """Return the transition for *role* acting on a request in *current*.

    Raises:
        ForbiddenException: the role cannot review leave requests.
        StateException: the request is terminal or not at the role's stage.
    """
    action = "approve" if approve else "reject"

    expected = stage_source_for(role)

    if is_terminal(current):
        raise StateException(
            action=action, current_status=current, expected_status=expected,
        )

    transition = TRANSITIONS.get((role, current, approve))
    if transition is None:
        raise StateException(
            action=action, current_status=current, expected_status=expected,
        )
    return transition
