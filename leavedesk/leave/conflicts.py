"""Calendar conflict detector — decides a new leave request's initial outcome.

Given the candidate range and the academic calendar, the detector returns one
of two verdicts and never touches the database itself:

  - ``AutoRejected``: the range hits a restricted event and the leave is not
    medical. The request is stored directly as ``first_rejected`` with a
    system comment and no reviewer.
  - ``Admitted``: the request enters ``pending_first``. Medical leave that hits
    restricted events carries those events plus an advisory note that the
    service appends to the stored reason.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional, Sequence, Union

from leavedesk.common.constants import RESTRICTED_EVENT_TYPES, LeaveCategory
from leavedesk.leave.intervals import DateRange, overlapping


@dataclass(frozen=True)
class AutoRejected:
    events: Sequence[Any]
    comment: str


@dataclass(frozen=True)
class Admitted:
    advisory_events: Sequence[Any] = field(default_factory=tuple)
    note: Optional[str] = None

    @property
    def has_advisory(self) -> bool:
        return bool(self.advisory_events)


ConflictVerdict = Union[AutoRejected, Admitted]


def event_range(event: Any) -> DateRange:
    return DateRange(event.start_date, event.end_date)


def restricted_conflicts(
    start: date,
    end: date,
    events: Iterable[Any],
) -> list[Any]:
    """Restricted-type events whose inclusive range meets ``[start, end]``."""
    restricted = [e for e in events if e.event_type in RESTRICTED_EVENT_TYPES]
    return overlapping(DateRange(start, end), restricted, key=event_range)


def _titles(events: Sequence[Any]) -> str:
    return ", ".join(e.title for e in events)


def auto_reject_comment(events: Sequence[Any]) -> str:
    return (
        f"Auto-rejected: Leave conflicts with important academic events "
        f"({_titles(events)}). Only medical leaves are considered during these dates."
    )


def advisory_note(events: Sequence[Any]) -> str:
    return (
        f"Note: This medical leave conflicts with important academic events "
        f"({_titles(events)}). Please review carefully."
    )


def append_advisory(reason: str, note: Optional[str]) -> str:
    """Concatenate the advisory note onto the requester's reason."""
    if not note:
        return reason
    return f"{reason}\n\n{note}"


def detect_conflicts(
    category: LeaveCategory,
    start: date,
    end: date,
    events: Iterable[Any],
) -> ConflictVerdict:
    conflicts = restricted_conflicts(start, end, events)
    if not conflicts:
        return Admitted()
    if category != LeaveCategory.medical:
        return AutoRejected(events=tuple(conflicts), comment=auto_reject_comment(conflicts))
    return Admitted(advisory_events=tuple(conflicts), note=advisory_note(conflicts))
