"""Closed date-range algebra used by calendar conflict detection."""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, NamedTuple, TypeVar

T = TypeVar("T")


class DateRange(NamedTuple):
    """Inclusive ``[start, end]`` range at calendar-day granularity."""

    start: date
    end: date


def intersects(a: DateRange, b: DateRange) -> bool:
    """True when the two closed ranges share at least one day.

    Covers an event starting inside, ending inside, spanning, or being
    spanned by the other range with the one inequality pair.
    """
    return a.start <= b.end and b.start <= a.end


def overlapping(
    candidate: DateRange,
    items: Iterable[T],
    key: Callable[[T], DateRange],
) -> list[T]:
    """Return the items whose range intersects *candidate*, order preserved."""
    return [item for item in items if intersects(candidate, key(item))]
