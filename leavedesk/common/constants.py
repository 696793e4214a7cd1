"""Enums and constants for LeaveDesk — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Actors / Roles ──────────────────────────────────────────────────

class ActorRole(str, enum.Enum):
    requester = "requester"
    first_line_reviewer = "first_line_reviewer"
    final_reviewer = "final_reviewer"


REVIEWER_ROLES: frozenset[ActorRole] = frozenset(
    {ActorRole.first_line_reviewer, ActorRole.final_reviewer}
)


# ── Leave ───────────────────────────────────────────────────────────

class LeaveCategory(str, enum.Enum):
    medical = "medical"
    casual = "casual"
    emergency = "emergency"
    other = "other"


class LeaveStatus(str, enum.Enum):
    pending_first = "pending_first"
    first_approved = "first_approved"
    first_rejected = "first_rejected"
    final_approved = "final_approved"
    final_rejected = "final_rejected"


TERMINAL_STATUSES: frozenset[LeaveStatus] = frozenset(
    {
        LeaveStatus.first_rejected,
        LeaveStatus.final_approved,
        LeaveStatus.final_rejected,
    }
)


class ReviewStage(str, enum.Enum):
    first_line = "first_line"
    final = "final"


# ── Academic calendar ───────────────────────────────────────────────

# Event types that block non-medical leave. Everything else is informational.
RESTRICTED_EVENT_TYPES: frozenset[str] = frozenset(
    {"exam", "expert-session", "important-event"}
)

