"""
Year-end leave rollover.

Carries unused days of carry-over leave types from one year into the next.
Re-running for the same year overwrites the carried amount, so the run is
idempotent.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

from app.core.exceptions import ValidationFailedError
from app.core.numbers import ZERO, as_decimal
from app.models.employee import Employee, EmployeeStatus
from app.models.leave_balance import LeaveBalance
from app.models.leave_type import LeaveType
from app.schemas.auth import Actor
from app.services.audit import AuditService
from app.services.base import BaseService
from app.services.leave_balance_service import LeaveBalanceLedger

MIN_ROLLOVER_YEAR = 2020
MAX_ROLLOVER_YEAR = 2100


class LeaveRolloverService(BaseService):

    def carry_amount(self, balance: LeaveBalance, leave_type: LeaveType, employee: Employee) -> Decimal:
        # Entitlement as earned by the last day of the closing year
        ledger = LeaveBalanceLedger(self.db, today=date(balance.year, 12, 31))
        unused = max(ledger.effective_entitlement(balance, leave_type, employee) - as_decimal(balance.used), ZERO)
        cap = as_decimal(leave_type.max_carry_over)
        if cap > ZERO:
            unused = min(unused, cap)
        return unused

    def rollover(self, from_year: int, actor: Actor) -> Dict[str, Any]:
        if from_year is None or not (MIN_ROLLOVER_YEAR <= from_year <= MAX_ROLLOVER_YEAR):
            raise ValidationFailedError(
                f"fromYear must be between {MIN_ROLLOVER_YEAR} and {MAX_ROLLOVER_YEAR}"
            )
        to_year = from_year + 1

        leave_types = self.db.query(LeaveType).filter(LeaveType.carry_over.is_(True)).all()
        employees = (
            self.db.query(Employee)
            .filter(Employee.status == EmployeeStatus.ACTIVE.value)
            .order_by(Employee.id)
            .all()
        )
        ledger = LeaveBalanceLedger(self.db, self.today)

        results: List[Dict[str, Any]] = []
        try:
            for employee in employees:
                for leave_type in leave_types:
                    source = ledger.find(employee.id, leave_type.id, from_year)
                    if source is None:
                        continue

                    carried = self.carry_amount(source, leave_type, employee)
                    target = ledger.get_or_create(employee, leave_type, to_year)
                    target.carried_over = carried

                    entry = {
                        "employee_id": employee.id,
                        "employee_name": employee.name,
                        "leave_type_code": leave_type.code,
                        "carried_over": carried,
                    }
                    if as_decimal(source.pending) > ZERO:
                        entry["warning"] = (
                            f"{as_decimal(source.pending)} day(s) still pending in {from_year} "
                            "were not carried over"
                        )
                    results.append(entry)

            AuditService(self.db).log_action(
                "LEAVE_ROLLOVER", "leave_balance", None, actor,
                details={"from_year": from_year, "to_year": to_year, "balances": len(results)},
            )
        except Exception:
            self.db.rollback()
            raise

        self.commit()
        self.log_info(f"Leave rollover {from_year} -> {to_year}: {len(results)} balance(s) carried")
        return {
            "from_year": from_year,
            "to_year": to_year,
            "processed": len(results),
            "results": results,
        }
