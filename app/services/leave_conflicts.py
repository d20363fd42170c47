"""
Leave conflict detection.

A candidate request conflicts with an existing PENDING/APPROVED request on
every calendar date both ranges cover. Day type and half-day slot never
allow two requests to share a date: a half day next to any other leave on
the same date (full or half, AM or PM, any leave type) is a conflict.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class ExistingLeave:
    start_date: date
    end_date: date
    days: Decimal
    leave_type_code: str
    day_type: str
    half_day_position: Optional[str] = None


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def occupied_dates(leave: ExistingLeave) -> set:
    """Dates held by a request. A half-day boundary date is held like any other."""
    return set(iter_dates(leave.start_date, leave.end_date))


def get_leave_conflict_dates(
    start: date,
    end: date,
    days: Decimal,
    leave_type_code: str,
    day_type: str,
    half_day_position: Optional[str],
    existing: Iterable[ExistingLeave],
) -> List[date]:
    """Return the sorted dates on which the candidate collides with an existing request."""
    candidate = set(iter_dates(start, end))
    if not candidate:
        return []

    conflicts = set()
    for leave in existing:
        if leave.end_date < start or leave.start_date > end:
            continue
        conflicts |= candidate & occupied_dates(leave)

    return sorted(conflicts)
