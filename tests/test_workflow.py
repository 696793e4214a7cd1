"""Review state machine: pure logic tests (no DB)."""

from __future__ import annotations

import itertools

import pytest

from leavedesk.common.constants import (
    TERMINAL_STATUSES,
    ActorRole,
    LeaveStatus,
    ReviewStage,
)
from leavedesk.common.exceptions import ForbiddenException, StateException
from leavedesk.leave.workflow import (
    STAGE_SOURCE,
    TRANSITIONS,
    is_terminal,
    resolve_transition,
    stage_source_for,
)


class TestResolveTransition:

    @pytest.mark.parametrize(
        "role,current,approve,target,stage",
        [
            (ActorRole.first_line_reviewer, LeaveStatus.pending_first, True,
             LeaveStatus.first_approved, ReviewStage.first_line),
            (ActorRole.first_line_reviewer, LeaveStatus.pending_first, False,
             LeaveStatus.first_rejected, ReviewStage.first_line),
            (ActorRole.final_reviewer, LeaveStatus.first_approved, True,
             LeaveStatus.final_approved, ReviewStage.final),
            (ActorRole.final_reviewer, LeaveStatus.first_approved, False,
             LeaveStatus.final_rejected, ReviewStage.final),
        ],
    )
    def test_legal_moves(self, role, current, approve, target, stage):
        t = resolve_transition(role, current, approve)
        assert t.source == current
        assert t.target == target
        assert t.stage == stage
        assert t.action == ("approve" if approve else "reject")

    @pytest.mark.parametrize("status", list(LeaveStatus))
    @pytest.mark.parametrize("approve", [True, False])
    def test_requester_is_forbidden_in_every_status(self, status, approve):
        with pytest.raises(ForbiddenException):
            resolve_transition(ActorRole.requester, status, approve)

    @pytest.mark.parametrize(
        "role,status",
        list(itertools.product(STAGE_SOURCE, sorted(TERMINAL_STATUSES))),
    )
    def test_terminal_statuses_reject_every_reviewer(self, role, status):
        with pytest.raises(StateException) as exc_info:
            resolve_transition(role, status, True)
        assert exc_info.value.current_status == status.value
        assert exc_info.value.expected_status == STAGE_SOURCE[role].value

    def test_hod_cannot_skip_the_advisor(self):
        with pytest.raises(StateException) as exc_info:
            resolve_transition(ActorRole.final_reviewer, LeaveStatus.pending_first, True)
        err = exc_info.value
        assert err.status_code == 409
        assert err.action == "approve"
        assert err.current_status == "pending_first"
        assert err.expected_status == "first_approved"

    def test_advisor_cannot_act_twice(self):
        with pytest.raises(StateException) as exc_info:
            resolve_transition(
                ActorRole.first_line_reviewer, LeaveStatus.first_approved, False,
            )
        assert exc_info.value.action == "reject"
        assert exc_info.value.extensions["attempted_action"] == "reject"


class TestTable:

    def test_no_transition_leaves_a_terminal_status(self):
        assert not any(source in TERMINAL_STATUSES for _, source, _ in TRANSITIONS)

    def test_every_target_is_reachable_once(self):
        targets = [t.target for t in TRANSITIONS.values()]
        assert len(targets) == len(set(targets))
        assert LeaveStatus.pending_first not in targets

    def test_is_terminal(self):
        assert is_terminal(LeaveStatus.first_rejected)
        assert is_terminal(LeaveStatus.final_approved)
        assert is_terminal(LeaveStatus.final_rejected)
        assert not is_terminal(LeaveStatus.pending_first)
        assert not is_terminal(LeaveStatus.first_approved)

    def test_stage_source_for_reviewers(self):
        assert stage_source_for(ActorRole.first_line_reviewer) == LeaveStatus.pending_first
        assert stage_source_for(ActorRole.final_reviewer) == LeaveStatus.first_approved

    def test_stage_source_for_requester_is_forbidden(self):
        with pytest.raises(ForbiddenException):
            stage_source_for(ActorRole.requester)
