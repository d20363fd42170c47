from datetime import date
from decimal import Decimal

from app.services.leave_conflicts import ExistingLeave, get_leave_conflict_dates


def _existing(start, end, day_type="FULL_DAY", position=None, code="AL"):
    return ExistingLeave(
        start_date=start,
        end_date=end,
        days=Decimal((end - start).days + 1),
        leave_type_code=code,
        day_type=day_type,
        half_day_position=position,
    )


def test_overlap_returns_shared_dates():
    existing = [_existing(date(2030, 3, 2), date(2030, 3, 4))]
    conflicts = get_leave_conflict_dates(
        date(2030, 3, 4), date(2030, 3, 6), Decimal("3"), "AL", "FULL_DAY", None, existing
    )
    assert conflicts == [date(2030, 3, 4)]


def test_adjacent_ranges_do_not_conflict():
    existing = [_existing(date(2030, 3, 2), date(2030, 3, 4))]
    conflicts = get_leave_conflict_dates(
        date(2030, 3, 5), date(2030, 3, 6), Decimal("2"), "AL", "FULL_DAY", None, existing
    )
    assert conflicts == []


def test_opposite_half_days_on_same_date_still_conflict():
    existing = [_existing(date(2030, 3, 4), date(2030, 3, 4), day_type="AM_HALF")]
    conflicts = get_leave_conflict_dates(
        date(2030, 3, 4), date(2030, 3, 4), Decimal("0.5"), "AL", "PM_HALF", None, existing
    )
    assert conflicts == [date(2030, 3, 4)]


def test_half_day_boundary_date_is_held():
    existing = [_existing(date(2030, 3, 2), date(2030, 3, 4), position="last")]
    conflicts = get_leave_conflict_dates(
        date(2030, 3, 4), date(2030, 3, 4), Decimal("0.5"), "AL", "PM_HALF", None, existing
    )
    assert conflicts == [date(2030, 3, 4)]


def test_conflicts_across_leave_types_are_merged_and_sorted():
    existing = [
        _existing(date(2030, 3, 8), date(2030, 3, 9), code="SL"),
        _existing(date(2030, 3, 1), date(2030, 3, 3), code="AL"),
        _existing(date(2030, 3, 9), date(2030, 3, 9), code="CL"),
    ]
    conflicts = get_leave_conflict_dates(
        date(2030, 3, 3), date(2030, 3, 9), Decimal("7"), "MC", "FULL_DAY", None, existing
    )
    assert conflicts == [date(2030, 3, 3), date(2030, 3, 8), date(2030, 3, 9)]
