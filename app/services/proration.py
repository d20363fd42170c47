"""
Leave proration.

Annual entitlements for prorated leave types (AL, MC) are scaled by the
number of months of service credited in the current calendar year, then
floored to the nearest half day.
"""
from datetime import date
from decimal import Decimal, ROUND_FLOOR
from typing import Optional

from app.core.numbers import Number, ZERO, as_decimal

HALF_DAY = Decimal("0.5")
MONTHS_PER_YEAR = 12


def round_to_half(value: Number) -> Decimal:
    """Floor to the nearest 0.5: 3.75 -> 3.5, 3.3 -> 3.0. Never rounds up."""
    value = as_decimal(value)
    return (value / HALF_DAY).to_integral_value(rounding=ROUND_FLOOR) * HALF_DAY


def credited_months(start_date: Optional[date], today: date) -> int:
    """
    Months of the current year that earn entitlement.

    Employees on board by January 1 earn every month up to and including the
    current one. Mid-year hires earn only completed months after the hire
    month, so a hire on the 1st of the current month earns nothing yet.
    """
    year_start = date(today.year, 1, 1)
    if start_date is None or start_date <= year_start:
        return today.month
    return max(today.month - start_date.month, 0)


def prorate_leave(
    entitlement: Number,
    start_date: Optional[date] = None,
    today: Optional[date] = None,
) -> Decimal:
    entitlement = as_decimal(entitlement)
    today = today or date.today()

    if entitlement == ZERO:
        return ZERO
    if start_date is not None and start_date.year > today.year:
        return ZERO

    months = credited_months(start_date, today)
    return round_to_half(entitlement * months / MONTHS_PER_YEAR)
