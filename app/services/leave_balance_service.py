"""
Leave balance ledger.

One row per (employee, leave type, year). ``used`` counts approved days,
``pending`` counts days reserved by requests awaiting a decision. Every
lifecycle transition moves days between those two counters; nothing else
writes them.

    available = effective entitlement + carried_over - used - pending

For prorated types the effective entitlement is recomputed on every read
from the stored raw entitlement, so it grows month by month.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import InsufficientBalanceError, LedgerIntegrityError
from app.core.numbers import Number, ZERO, as_decimal
from app.models.employee import Employee
from app.models.leave_balance import LeaveBalance
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.leave_type import LeaveType
from app.services.base import BaseService
from app.services.proration import prorate_leave


class LeaveBalanceLedger(BaseService):

    def find(self, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        return self.db.query(LeaveBalance).filter(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type_id == leave_type_id,
            LeaveBalance.year == year,
        ).first()

    def get_or_create(self, employee: Employee, leave_type: LeaveType, year: int) -> LeaveBalance:
        """Fetch the balance row, seeding it from the leave type's default entitlement."""
        balance = self.find(employee.id, leave_type.id, year)
        if balance:
            return balance

        balance = LeaveBalance(
            employee_id=employee.id,
            leave_type_id=leave_type.id,
            year=year,
            entitlement=as_decimal(leave_type.default_days),
            carried_over=ZERO,
            used=ZERO,
            pending=ZERO,
        )
        try:
            with self.db.begin_nested():
                self.db.add(balance)
        except IntegrityError:
            # Created concurrently by another request
            balance = self.find(employee.id, leave_type.id, year)
        self._logger.info(
            f"Leave balance ready: employee={employee.id} type={leave_type.code} year={year}"
        )
        return balance

    def proration_date(self, year: int) -> date:
        """Closed years are valued as of their last day; the current year as of today."""
        if year < self.today.year:
            return date(year, 12, 31)
        return self.today

    def effective_entitlement(self, balance: LeaveBalance, leave_type: LeaveType, employee: Employee) -> Decimal:
        raw = as_decimal(balance.entitlement)
        if not leave_type.is_prorated:
            return raw
        return prorate_leave(raw, employee.start_date, self.proration_date(balance.year))

    def available(
        self,
        balance: LeaveBalance,
        leave_type: LeaveType,
        employee: Employee,
        released: Number = 0,
    ) -> Decimal:
        """
        Days still free to reserve. ``released`` is pending time the caller is
        about to give back (the old day count of a request being edited).
        """
        return (
            self.effective_entitlement(balance, leave_type, employee)
            + as_decimal(balance.carried_over)
            - as_decimal(balance.used)
            - (as_decimal(balance.pending) - as_decimal(released))
        )

    def ensure_available(
        self,
        balance: LeaveBalance,
        leave_type: LeaveType,
        employee: Employee,
        requested: Number,
        released: Number = 0,
    ):
        requested = as_decimal(requested)
        available = self.available(balance, leave_type, employee, released)
        if requested > available:
            self.log_warning(
                f"Insufficient balance: employee={employee.id} type={leave_type.code} "
                f"available={available} requested={requested}"
            )
            raise InsufficientBalanceError(available=available, requested=requested)

    # --- Lifecycle deltas ---

    def reserve(self, balance: LeaveBalance, days: Number):
        """Submit, or reset of a rejected request."""
        self._apply(balance, pending=as_decimal(days))

    def release(self, balance: LeaveBalance, days: Number):
        """Reject or cancel of a pending request."""
        self._apply(balance, pending=-as_decimal(days))

    def consume(self, balance: LeaveBalance, days: Number):
        """Approve: pending days become used days."""
        days = as_decimal(days)
        self._apply(balance, used=days, pending=-days)

    def restore(self, balance: LeaveBalance, days: Number):
        """Reset of an approved request: used days go back to pending."""
        days = as_decimal(days)
        self._apply(balance, used=-days, pending=days)

    def adjust_pending(self, balance: LeaveBalance, old_days: Number, new_days: Number):
        """Edit of a pending request."""
        self._apply(balance, pending=as_decimal(new_days) - as_decimal(old_days))

    def _apply(self, balance: LeaveBalance, used: Decimal = ZERO, pending: Decimal = ZERO):
        new_used = as_decimal(balance.used) + used
        new_pending = as_decimal(balance.pending) + pending
        if new_used < ZERO or new_pending < ZERO:
            self._logger.error(
                f"Ledger underflow on balance {balance.id}: used={new_used} pending={new_pending}"
            )
            raise LedgerIntegrityError()
        balance.used = new_used
        balance.pending = new_pending

    # --- Reporting ---

    def summarize(self, employee: Employee, year: int) -> List[Dict]:
        """Per-type balance view for one employee and year, for every leave type."""
        leave_types = self.db.query(LeaveType).order_by(LeaveType.id).all()
        balances = {
            b.leave_type_id: b
            for b in self.db.query(LeaveBalance).filter(
                LeaveBalance.employee_id == employee.id,
                LeaveBalance.year == year,
            ).all()
        }
        rejected_counts = dict(
            self.db.query(LeaveRequest.leave_type_id, func.count(LeaveRequest.id))
            .filter(
                LeaveRequest.employee_id == employee.id,
                LeaveRequest.balance_year == year,
                LeaveRequest.status == LeaveStatus.REJECTED.value,
            )
            .group_by(LeaveRequest.leave_type_id)
            .all()
        )

        summary = []
        for leave_type in leave_types:
            balance = balances.get(leave_type.id)
            if balance is None:
                # Not yet materialized: report the defaults without writing a row
                balance = LeaveBalance(
                    entitlement=as_decimal(leave_type.default_days),
                    carried_over=ZERO,
                    used=ZERO,
                    pending=ZERO,
                )
            entitlement = self.effective_entitlement(balance, leave_type, employee)
            summary.append({
                "leave_type_id": leave_type.id,
                "leave_type_code": leave_type.code,
                "leave_type_name": leave_type.name,
                "year": year,
                "entitlement": entitlement,
                "carried_over": as_decimal(balance.carried_over),
                "used": as_decimal(balance.used),
                "pending": as_decimal(balance.pending),
                "available": self.available(balance, leave_type, employee),
                "rejected_count": rejected_counts.get(leave_type.id, 0),
            })
        return summary
