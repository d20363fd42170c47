import pytest
from datetime import date
from decimal import Decimal

from app.core.exceptions import ValidationFailedError
from app.models.payslip import Payslip
from app.services import payroll_service

TODAY = date(2030, 6, 15)


def test_pay_period_bounds():
    assert payroll_service.pay_period(2, 2030) == (date(2030, 2, 1), date(2030, 2, 28), date(2030, 2, 28))
    assert payroll_service.pay_period(6, 2030) == (date(2030, 6, 1), date(2030, 6, 30), date(2030, 6, 28))


def test_generate_creates_payslips(db_session, make_employee):
    emp = make_employee(name="Bob Ng", date_of_birth=date(1990, 6, 15), basic_salary="5000", allowances="500")

    result = payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)

    assert result["created"] == 1
    assert result["skipped"] == 0
    assert result["errors"] == 0

    payslip = db_session.query(Payslip).filter(Payslip.employee_id == emp.id).one()
    assert payslip.pay_period_start == date(2030, 6, 1)
    assert payslip.pay_period_end == date(2030, 6, 30)
    assert payslip.payment_date == date(2030, 6, 28)
    assert payslip.status == "GENERATED"
    assert payslip.gross_salary == Decimal("5500")
    assert payslip.cpf_employee == Decimal("1100")
    assert payslip.cpf_employer == Decimal("935")
    assert payslip.income_tax == Decimal("825")
    assert payslip.net_salary == Decimal("3575")


def test_contribution_exempt_employee_gets_none(db_session, make_employee):
    exempt = make_employee(name="Priya Nair", basic_salary="5000", allowances="500")
    exempt.salary_info.cpf_applicable = False
    contributing = make_employee(name="Wei Lin", basic_salary="5000", allowances="500")
    db_session.commit()

    result = payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)

    assert result["created"] == 2
    slips = {p.employee_id: p for p in db_session.query(Payslip).all()}
    assert slips[exempt.id].cpf_employee == Decimal("0")
    assert slips[exempt.id].cpf_employer == Decimal("0")
    assert slips[exempt.id].net_salary == Decimal("4675")
    assert slips[contributing.id].cpf_employee == Decimal("1100")


def test_rerun_skips_existing_payslips(db_session, make_employee):
    make_employee(basic_salary="4000")
    make_employee(basic_salary="6000")

    first = payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)
    second = payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)

    assert first["created"] == 2
    assert second["created"] == 0
    assert second["skipped"] == 2
    assert db_session.query(Payslip).count() == 2


def test_employee_without_birth_date_is_skipped(db_session, make_employee):
    make_employee(basic_salary="4000")
    make_employee(basic_salary="4000", date_of_birth=None)

    result = payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)

    assert result["created"] == 1
    assert result["skipped"] == 1


def test_inactive_and_unsalaried_employees_are_excluded(db_session, make_employee):
    make_employee(basic_salary="4000")
    make_employee(basic_salary="4000", status="TERMINATED")
    make_employee()

    result = payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)

    assert result["created"] == 1
    assert result["skipped"] == 0


def test_failure_on_one_employee_does_not_stop_the_batch(db_session, make_employee, monkeypatch):
    good = make_employee(basic_salary="4000")
    make_employee(basic_salary="9999")
    later = make_employee(basic_salary="4500")

    original = payroll_service.calculate_payroll

    def flaky(basic_salary, *args, **kwargs):
        if Decimal(basic_salary) == Decimal("9999"):
            raise RuntimeError("salary record corrupt")
        return original(basic_salary, *args, **kwargs)

    monkeypatch.setattr(payroll_service, "calculate_payroll", flaky)

    result = payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)

    assert result["created"] == 2
    assert result["errors"] == 1
    assert result["error_details"][0]["error"] == "salary record corrupt"
    ids = {p.employee_id for p in db_session.query(Payslip).all()}
    assert ids == {good.id, later.id}


def test_no_eligible_employees(db_session, make_employee):
    make_employee()
    with pytest.raises(ValidationFailedError, match="No active employees with salary info found"):
        payroll_service.generate_payroll(db_session, 6, 2030, today=TODAY)


@pytest.mark.parametrize("month,year", [(None, 2030), (6, None), (0, 2030)])
def test_month_and_year_required(db_session, month, year):
    with pytest.raises(ValidationFailedError, match="Month and year are required"):
        payroll_service.generate_payroll(db_session, month, year, today=TODAY)


def test_month_out_of_range(db_session):
    with pytest.raises(ValidationFailedError, match="Month must be between 1 and 12"):
        payroll_service.generate_payroll(db_session, 13, 2030, today=TODAY)
