"""Day counting for leave requests."""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from app.models.leave_request import DayType
from app.services.proration import HALF_DAY, round_to_half


@dataclass(frozen=True)
class LeaveDays:
    days: Decimal
    day_type: str
    half_day_position: Optional[str]


def days_between(start: date, end: date) -> int:
    """Inclusive calendar-day span."""
    return abs((end - start).days) + 1


def calculate_leave_days(
    start: date,
    end: date,
    day_type: Optional[str],
    half_day_position: Optional[str],
    supports_half_day: bool,
) -> LeaveDays:
    """
    Resolve the effective day type and the number of days a request consumes.

    Only half-day eligible types keep client half-day input. A single-day
    request may be AM or PM; a multi-day request may mark its first or last
    day as a half day. Everything else is forced to full days over the
    whole span.
    """
    span = days_between(start, end)

    if not supports_half_day:
        return LeaveDays(Decimal(span), DayType.FULL_DAY.value, None)

    if start == end:
        effective_type = day_type or DayType.FULL_DAY.value
        days = Decimal(1) if effective_type == DayType.FULL_DAY.value else HALF_DAY
        return LeaveDays(days, effective_type, None)

    if half_day_position:
        return LeaveDays(round_to_half(Decimal(span) - HALF_DAY), DayType.FULL_DAY.value, half_day_position)

    return LeaveDays(Decimal(span), DayType.FULL_DAY.value, None)
