"""
Leave request lifecycle.

    PENDING --approve--> APPROVED
    PENDING --reject---> REJECTED
    PENDING --cancel---> CANCELLED (terminal)
    APPROVED/REJECTED --reset--> PENDING

Each transition validates, writes the request, moves the balance counters,
mirrors the calendar and appends an audit entry, then commits once. Any
failure rolls all of it back.
"""
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import joinedload
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import (
    AccessDeniedError,
    ConcurrentUpdateError,
    LeaveConflictError,
    LeaveStateError,
    NotFoundError,
    ValidationFailedError,
)
from app.core.numbers import as_decimal
from app.models.employee import Employee
from app.models.leave_request import ACTIVE_STATUSES, LeaveRequest, LeaveStatus
from app.models.leave_type import LeaveType
from app.schemas.auth import Actor
from app.services.audit import AuditService
from app.services.base import BaseService
from app.services.calendar_service import CalendarService
from app.services.leave_balance_service import LeaveBalanceLedger
from app.services.leave_conflicts import ExistingLeave, get_leave_conflict_dates
from app.services.leave_days import calculate_leave_days


def _snapshot(leave: LeaveRequest) -> Dict:
    return {
        "status": leave.status,
        "start_date": leave.start_date,
        "end_date": leave.end_date,
        "days": leave.days,
        "day_type": leave.day_type,
        "half_day_position": leave.half_day_position,
    }


class LeaveService(BaseService):

    def __init__(self, db, actor: Actor, today: Optional[date] = None):
        super().__init__(db, today)
        self.actor = actor
        self.ledger = LeaveBalanceLedger(db, today)
        self.calendar = CalendarService(db, today)
        self.audit = AuditService(db, today)

    # --- Lookups ---

    def _require_employee_id(self) -> int:
        if self.actor.employee_id is None:
            raise ValidationFailedError("No employee record found for this user")
        return self.actor.employee_id

    def _lock_employee(self, employee_id: int) -> Employee:
        """Serializes balance checks for one employee (no-op on SQLite)."""
        employee = (
            self.db.query(Employee)
            .filter(Employee.id == employee_id)
            .with_for_update()
            .first()
        )
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _get_leave_type(self, leave_type_id: int) -> LeaveType:
        leave_type = self.db.query(LeaveType).filter(LeaveType.id == leave_type_id).first()
        if not leave_type:
            raise ValidationFailedError("Invalid leave type")
        return leave_type

    def _get_request(self, request_id: int) -> LeaveRequest:
        leave = (
            self.db.query(LeaveRequest)
            .options(joinedload(LeaveRequest.employee), joinedload(LeaveRequest.leave_type))
            .filter(LeaveRequest.id == request_id)
            .first()
        )
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def _require_approver(self):
        if not self.actor.can_approve:
            self.log_warning(f"Leave decision refused for role {self.actor.role.value}")
            raise AccessDeniedError("Only managers, HR or admins can decide leave requests")

    def _require_owner(self, leave: LeaveRequest):
        if not self.actor.owns(leave.employee_id):
            raise AccessDeniedError("You can only modify your own leave requests")

    @staticmethod
    def _validate_range(start_date: Optional[date], end_date: Optional[date]):
        if start_date is None or end_date is None:
            raise ValidationFailedError("Start date and end date are required")
        if end_date < start_date:
            raise ValidationFailedError("End date must be on or after start date")

    def _check_conflicts(
        self,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        resolved,
        exclude_id: Optional[int] = None,
    ):
        query = self.db.query(LeaveRequest).options(joinedload(LeaveRequest.leave_type)).filter(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status.in_(ACTIVE_STATUSES),
            LeaveRequest.start_date <= end_date,
            LeaveRequest.end_date >= start_date,
        )
        if exclude_id is not None:
            query = query.filter(LeaveRequest.id != exclude_id)

        existing = [
            ExistingLeave(
                start_date=r.start_date,
                end_date=r.end_date,
                days=as_decimal(r.days),
                leave_type_code=r.leave_type.code,
                day_type=r.day_type,
                half_day_position=r.half_day_position,
            )
            for r in query.all()
        ]
        conflicts = get_leave_conflict_dates(
            start_date,
            end_date,
            resolved.days,
            leave_type.code,
            resolved.day_type,
            resolved.half_day_position,
            existing,
        )
        if conflicts:
            self.log_warning(f"Leave conflict for employee {employee_id} on {len(conflicts)} date(s)")
            raise LeaveConflictError([d.isoformat() for d in conflicts])

    def _commit(self):
        try:
            self.commit()
        except StaleDataError:
            self.log_warning("Concurrent update detected on leave request or balance")
            raise ConcurrentUpdateError()

    def _balance_for(self, leave: LeaveRequest):
        return self.ledger.get_or_create(leave.employee, leave.leave_type, leave.balance_year)

    # --- Operations ---

    def submit(
        self,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        day_type: Optional[str] = None,
        half_day_position: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        employee_id = self._require_employee_id()
        self._validate_range(start_date, end_date)

        try:
            employee = self._lock_employee(employee_id)
            leave_type = self._get_leave_type(leave_type_id)
            resolved = calculate_leave_days(
                start_date, end_date, day_type, half_day_position, leave_type.supports_half_day
            )
            self._check_conflicts(employee_id, leave_type, start_date, end_date, resolved)

            balance = self.ledger.get_or_create(employee, leave_type, start_date.year)
            self.ledger.ensure_available(balance, leave_type, employee, resolved.days)

            leave = LeaveRequest(
                employee_id=employee.id,
                leave_type_id=leave_type.id,
                balance_year=start_date.year,
                start_date=start_date,
                end_date=end_date,
                days=resolved.days,
                day_type=resolved.day_type,
                half_day_position=resolved.half_day_position,
                reason=reason,
                status=LeaveStatus.PENDING.value,
            )
            self.db.add(leave)
            self.ledger.reserve(balance, resolved.days)
        except Exception:
            self.db.rollback()
            raise

        self._commit()
        self.db.refresh(leave)
        self.log_info(
            f"Leave request {leave.id} submitted: employee={employee_id} type={leave_type.code} days={leave.days}"
        )
        return leave

    def edit(
        self,
        request_id: int,
        start_date: date,
        end_date: date,
        day_type: Optional[str] = None,
        half_day_position: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        self._validate_range(start_date, end_date)

        try:
            leave = self._get_request(request_id)
            self._require_owner(leave)
            if leave.status != LeaveStatus.PENDING.value:
                raise LeaveStateError("Only pending leave requests can be edited")
            if start_date.year != leave.balance_year:
                raise ValidationFailedError("Leave request cannot be moved to a different year")

            employee = self._lock_employee(leave.employee_id)
            leave_type = leave.leave_type
            resolved = calculate_leave_days(
                start_date, end_date, day_type, half_day_position, leave_type.supports_half_day
            )
            self._check_conflicts(
                employee.id, leave_type, start_date, end_date, resolved, exclude_id=leave.id
            )

            old_days = as_decimal(leave.days)
            balance = self._balance_for(leave)
            self.ledger.ensure_available(balance, leave_type, employee, resolved.days, released=old_days)

            before = _snapshot(leave)
            leave.start_date = start_date
            leave.end_date = end_date
            leave.days = resolved.days
            leave.day_type = resolved.day_type
            leave.half_day_position = resolved.half_day_position
            if reason is not None:
                leave.reason = reason
            self.ledger.adjust_pending(balance, old_days, resolved.days)

            self.audit.log_action(
                "EDIT_LEAVE", "leave_request", leave.id, self.actor,
                before_state=before, after_state=_snapshot(leave),
            )
        except Exception:
            self.db.rollback()
            raise

        self._commit()
        self.log_info(f"Leave request {leave.id} edited: days {old_days} -> {leave.days}")
        return leave

    def approve(self, request_id: int) -> LeaveRequest:
        self._require_approver()
        try:
            leave = self._get_request(request_id)
            if leave.status != LeaveStatus.PENDING.value:
                raise LeaveStateError("Leave request is not pending")

            before = _snapshot(leave)
            leave.status = LeaveStatus.APPROVED.value
            leave.approver_id = self.actor.employee_id
            leave.approved_at = datetime.now(timezone.utc)
            self.ledger.consume(self._balance_for(leave), leave.days)
            self.calendar.create_leave_event(leave)

            self.audit.log_action(
                "APPROVE_LEAVE", "leave_request", leave.id, self.actor,
                before_state=before, after_state=_snapshot(leave),
            )
        except Exception:
            self.db.rollback()
            raise

        self._commit()
        self.log_info(f"Leave request {leave.id} approved by {self.actor.user_id}")
        return leave

    def reject(self, request_id: int, reason: Optional[str] = None) -> LeaveRequest:
        self._require_approver()
        try:
            leave = self._get_request(request_id)
            if leave.status != LeaveStatus.PENDING.value:
                raise LeaveStateError("Leave request is not pending")

            before = _snapshot(leave)
            leave.status = LeaveStatus.REJECTED.value
            leave.approver_id = self.actor.employee_id
            leave.rejected_at = datetime.now(timezone.utc)
            leave.rejection_reason = reason
            self.ledger.release(self._balance_for(leave), leave.days)

            self.audit.log_action(
                "REJECT_LEAVE", "leave_request", leave.id, self.actor,
                details={"reason": reason}, before_state=before, after_state=_snapshot(leave),
            )
        except Exception:
            self.db.rollback()
            raise

        self._commit()
        self.log_info(f"Leave request {leave.id} rejected by {self.actor.user_id}")
        return leave

    def cancel(self, request_id: int) -> LeaveRequest:
        try:
            leave = self._get_request(request_id)
            self._require_owner(leave)
            if leave.status != LeaveStatus.PENDING.value:
                raise LeaveStateError("Only pending leave requests can be cancelled")

            before = _snapshot(leave)
            leave.status = LeaveStatus.CANCELLED.value
            leave.cancelled_at = datetime.now(timezone.utc)
            self.ledger.release(self._balance_for(leave), leave.days)

            self.audit.log_action(
                "CANCEL_LEAVE", "leave_request", leave.id, self.actor,
                before_state=before, after_state=_snapshot(leave),
            )
        except Exception:
            self.db.rollback()
            raise

        self._commit()
        self.log_info(f"Leave request {leave.id} cancelled")
        return leave

    def reset(self, request_id: int, reason: Optional[str] = None) -> LeaveRequest:
        """Send an approved or rejected request back to PENDING, reversing its balance effect."""
        self._require_approver()
        try:
            leave = self._get_request(request_id)
            if leave.status == LeaveStatus.CANCELLED.value:
                raise LeaveStateError("Cancelled leave requests cannot be reset")
            if leave.status == LeaveStatus.PENDING.value:
                raise LeaveStateError("Leave request is already pending")

            before = _snapshot(leave)
            balance = self._balance_for(leave)
            if leave.status == LeaveStatus.APPROVED.value:
                self.ledger.restore(balance, leave.days)
                self.calendar.delete_leave_event(leave)
            else:
                # The released days may have been reserved elsewhere since the rejection
                self.ledger.ensure_available(balance, leave.leave_type, leave.employee, leave.days)
                self.ledger.reserve(balance, leave.days)

            leave.status = LeaveStatus.PENDING.value
            leave.approver_id = None
            leave.approved_at = None
            leave.rejected_at = None
            leave.rejection_reason = None

            self.audit.log_action(
                "RESET_TO_PENDING", "leave_request", leave.id, self.actor,
                details={"reason": reason, "previous_status": before["status"]},
                before_state=before, after_state=_snapshot(leave),
            )
        except Exception:
            self.db.rollback()
            raise

        self._commit()
        self.log_info(f"Leave request {leave.id} reset to pending by {self.actor.user_id}")
        return leave

    # --- Queries ---

    def get(self, request_id: int) -> LeaveRequest:
        leave = self._get_request(request_id)
        if not (self.actor.can_approve or self.actor.owns(leave.employee_id)):
            raise AccessDeniedError("You can only view your own leave requests")
        return leave

    def list_requests(
        self,
        status: Optional[str] = None,
        employee_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> List[LeaveRequest]:
        """Staff see their own requests; approvers see everyone's."""
        query = self.db.query(LeaveRequest).options(
            joinedload(LeaveRequest.employee), joinedload(LeaveRequest.leave_type)
        )
        if not self.actor.can_approve:
            query = query.filter(LeaveRequest.employee_id == self._require_employee_id())
        elif employee_id is not None:
            query = query.filter(LeaveRequest.employee_id == employee_id)

        if status:
            query = query.filter(LeaveRequest.status == status)
        if year:
            query = query.filter(LeaveRequest.balance_year == year)
        return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()

    def balance_summary(self, employee_id: Optional[int] = None, year: Optional[int] = None) -> List[Dict]:
        target_id = employee_id if employee_id is not None else self._require_employee_id()
        if not (self.actor.can_approve or self.actor.owns(target_id)):
            raise AccessDeniedError("You can only view your own leave balances")
        employee = self.db.query(Employee).filter(Employee.id == target_id).first()
        if not employee:
            raise NotFoundError("Employee not found")
        return self.ledger.summarize(employee, year or self.today.year)
