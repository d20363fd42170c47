import pytest
from datetime import date
from decimal import Decimal

from app.core.exceptions import ValidationFailedError
from app.models.leave_balance import LeaveBalance
from app.schemas.auth import Actor, UserRole
from app.services.leave_rollover import LeaveRolloverService
from app.services.leave_service import LeaveService

TODAY = date(2030, 12, 15)


@pytest.fixture
def admin_actor():
    return Actor(user_id="admin-1", role=UserRole.ADMIN)


@pytest.fixture
def used_five_days(db_session, staff_actor, manager_actor, leave_types):
    staff = LeaveService(db_session, staff_actor, today=TODAY)
    leave = staff.submit(leave_types["AL"].id, date(2030, 2, 4), date(2030, 2, 8))
    LeaveService(db_session, manager_actor, today=TODAY).approve(leave.id)
    return leave


def _next_year_balance(db_session, employee_id, leave_type):
    return db_session.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee_id,
        LeaveBalance.leave_type_id == leave_type.id,
        LeaveBalance.year == 2031,
    ).one()


def test_unused_annual_leave_is_carried(db_session, employee, leave_types, used_five_days, admin_actor):
    result = LeaveRolloverService(db_session, today=TODAY).rollover(2030, admin_actor)

    assert result["to_year"] == 2031
    entries = [r for r in result["results"] if r["employee_id"] == employee.id]
    assert entries == [{
        "employee_id": employee.id,
        "employee_name": "Alice Tan",
        "leave_type_code": "AL",
        "carried_over": Decimal("9"),
    }]
    balance = _next_year_balance(db_session, employee.id, leave_types["AL"])
    assert balance.carried_over == Decimal("9")
    assert balance.entitlement == Decimal("14")


def test_rollover_is_idempotent(db_session, employee, leave_types, used_five_days, admin_actor):
    service = LeaveRolloverService(db_session, today=TODAY)
    service.rollover(2030, admin_actor)
    service.rollover(2030, admin_actor)

    assert _next_year_balance(db_session, employee.id, leave_types["AL"]).carried_over == Decimal("9")


def test_carry_is_capped(db_session, employee, leave_types, used_five_days, admin_actor):
    leave_types["AL"].max_carry_over = Decimal("5")
    db_session.commit()

    LeaveRolloverService(db_session, today=TODAY).rollover(2030, admin_actor)

    assert _next_year_balance(db_session, employee.id, leave_types["AL"]).carried_over == Decimal("5")


def test_pending_days_produce_a_warning(db_session, staff_actor, employee, leave_types, admin_actor):
    LeaveService(db_session, staff_actor, today=TODAY).submit(
        leave_types["AL"].id, date(2030, 12, 22), date(2030, 12, 23)
    )

    result = LeaveRolloverService(db_session, today=TODAY).rollover(2030, admin_actor)

    entry = next(r for r in result["results"] if r["employee_id"] == employee.id)
    assert entry["carried_over"] == Decimal("14")
    assert "still pending" in entry["warning"]


def test_non_carry_types_are_ignored(db_session, staff_actor, employee, leave_types, admin_actor):
    LeaveService(db_session, staff_actor, today=TODAY).submit(
        leave_types["SL"].id, date(2030, 3, 4), date(2030, 3, 4)
    )

    result = LeaveRolloverService(db_session, today=TODAY).rollover(2030, admin_actor)

    assert all(r["leave_type_code"] == "AL" for r in result["results"])


@pytest.mark.parametrize("year", [2019, 2101])
def test_year_out_of_range(db_session, admin_actor, year):
    with pytest.raises(ValidationFailedError):
        LeaveRolloverService(db_session, today=TODAY).rollover(year, admin_actor)
