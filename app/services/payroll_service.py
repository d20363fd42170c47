"""
Payroll Service Layer

Business logic for payslip generation and retrieval, keeping the router
focused on HTTP request/response handling.

Architecture:
- Router -> Service (this module) -> Models/Calculator
- Contribution and tax arithmetic lives in cpf_calculator
"""

import calendar
from datetime import date
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from typing import Dict, Any, List, Optional, Tuple
import logging

from app.core.config import settings
from app.core.exceptions import AccessDeniedError, NotFoundError, ValidationFailedError
from app.models.employee import Employee, EmployeeStatus
from app.models.payslip import Payslip, PayslipStatus
from app.models.salary_info import SalaryInfo
from app.schemas.auth import Actor
from app.services.cpf_calculator import calculate_payroll

logger = logging.getLogger(__name__)


def pay_period(month: int, year: int, payment_day: Optional[int] = None) -> Tuple[date, date, date]:
    """
    Pay period bounds and payment date for a month.

    The payment day is clamped to the month's length.
    """
    last_day = calendar.monthrange(year, month)[1]
    payment_day = min(payment_day or settings.payroll.payment_day, last_day)
    return date(year, month, 1), date(year, month, last_day), date(year, month, payment_day)


def validate_period(month: Optional[int], year: Optional[int]):
    if not month or not year:
        raise ValidationFailedError("Month and year are required")
    if not 1 <= month <= 12:
        raise ValidationFailedError("Month must be between 1 and 12")
    if not 2000 <= year <= 2100:
        raise ValidationFailedError("Year must be between 2000 and 2100")


def generate_payroll(
    db: Session,
    month: Optional[int],
    year: Optional[int],
    today: Optional[date] = None
) -> Dict[str, Any]:
    """
    Generate payslips for every active employee with salary info.

    Each employee is committed on its own: one failure is counted and the
    batch moves on. Employees that already have a payslip for the period,
    or lack a date of birth, are skipped.

    Returns:
        Dict with counts: {created, skipped, errors, message}
    """
    validate_period(month, year)
    period_start, period_end, payment_date = pay_period(month, year)
    today = today or date.today()

    employees = (
        db.query(Employee)
        .join(SalaryInfo, SalaryInfo.employee_id == Employee.id)
        .options(joinedload(Employee.salary_info))
        .filter(Employee.status == EmployeeStatus.ACTIVE.value)
        .order_by(Employee.id)
        .all()
    )

    if not employees:
        raise ValidationFailedError("No active employees with salary info found")

    created = 0
    skipped = 0
    errors = []

    for emp in employees:
        if emp.date_of_birth is None:
            logger.warning(f"Payroll skipped for employee {emp.id}: missing date of birth")
            skipped += 1
            continue

        existing = db.query(Payslip.id).filter(
            Payslip.employee_id == emp.id,
            Payslip.pay_period_start == period_start,
            Payslip.pay_period_end == period_end
        ).first()
        if existing:
            skipped += 1
            continue

        try:
            breakdown = calculate_payroll(
                emp.salary_info.basic_salary,
                emp.salary_info.allowances,
                emp.date_of_birth,
                income_tax_rate=settings.payroll.income_tax_rate,
                today=today,
                ow_ceiling=settings.payroll.ow_ceiling,
                annual_ceiling=settings.payroll.annual_ceiling,
                cpf_applicable=emp.salary_info.cpf_applicable,
            )
            payslip = Payslip(
                employee_id=emp.id,
                pay_period_start=period_start,
                pay_period_end=period_end,
                payment_date=payment_date,
                basic_salary=breakdown.basic_salary,
                allowances=breakdown.allowances,
                overtime=breakdown.overtime,
                bonus=breakdown.bonus,
                gross_salary=breakdown.gross_salary,
                cpf_employee=breakdown.cpf_employee,
                cpf_employer=breakdown.cpf_employer,
                income_tax=breakdown.income_tax,
                other_deductions=breakdown.other_deductions,
                total_deductions=breakdown.total_deductions,
                net_salary=breakdown.net_salary,
                status=PayslipStatus.GENERATED.value
            )
            db.add(payslip)
            db.commit()
            created += 1
        except IntegrityError:
            # A concurrent run created it first
            db.rollback()
            skipped += 1
        except Exception as e:
            db.rollback()
            logger.error(f"Payroll failed for employee {emp.id}: {e}", exc_info=True)
            errors.append({"employee_id": emp.id, "error": str(e)})

    logger.info(
        f"Payroll {month:02d}/{year}: created={created} skipped={skipped} errors={len(errors)}"
    )
    return {
        "created": created,
        "skipped": skipped,
        "errors": len(errors),
        "message": f"Generated {created} payslip(s) for {month:02d}/{year}",
        "error_details": errors if errors else None
    }


def get_employee_payslip_history(db: Session, employee_id: int, actor: Actor) -> List[Dict[str, Any]]:
    """Payslips for one employee, newest period first."""
    if not (actor.is_payroll_admin or actor.owns(employee_id)):
        raise AccessDeniedError("You can only view your own payslips")

    payslips = db.query(Payslip).filter(
        Payslip.employee_id == employee_id
    ).order_by(Payslip.pay_period_start.desc()).all()
    return [_payslip_to_dict(p) for p in payslips]


def get_payslip_details(db: Session, payslip_id: int, actor: Actor) -> Dict[str, Any]:
    payslip = db.query(Payslip).options(joinedload(Payslip.employee)).filter(
        Payslip.id == payslip_id
    ).first()

    if not payslip:
        raise NotFoundError(f"Payslip {payslip_id} not found")
    if not (actor.is_payroll_admin or actor.owns(payslip.employee_id)):
        raise AccessDeniedError("You can only view your own payslips")

    result = _payslip_to_dict(payslip)
    result["employee_name"] = payslip.employee.name if payslip.employee else None
    return result


def _payslip_to_dict(payslip: Payslip) -> Dict[str, Any]:
    """Convert Payslip model to dictionary."""
    return {
        "id": payslip.id,
        "employee_id": payslip.employee_id,
        "pay_period_start": payslip.pay_period_start,
        "pay_period_end": payslip.pay_period_end,
        "payment_date": payslip.payment_date,
        "basic_salary": payslip.basic_salary,
        "allowances": payslip.allowances,
        "overtime": payslip.overtime,
        "bonus": payslip.bonus,
        "gross_salary": payslip.gross_salary,
        "cpf_employee": payslip.cpf_employee,
        "cpf_employer": payslip.cpf_employer,
        "income_tax": payslip.income_tax,
        "other_deductions": payslip.other_deductions,
        "total_deductions": payslip.total_deductions,
        "net_salary": payslip.net_salary,
        "status": payslip.status,
        "created_at": payslip.created_at,
    }
