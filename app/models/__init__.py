# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    employee, salary_info,
    leave_type, leave_balance, leave_request,
    payslip, calendar_event, audit_log
)

# Explicit class exports for cleaner imports
from .employee import Employee, EmployeeStatus
from .salary_info import SalaryInfo
from .leave_type import LeaveType
from .leave_balance import LeaveBalance
from .leave_request import LeaveRequest, LeaveStatus, DayType, HalfDayPosition
from .payslip import Payslip, PayslipStatus
from .calendar_event import CalendarEvent, EventType
from .audit_log import AuditLog

__all__ = [
    "Employee",
    "EmployeeStatus",
    "SalaryInfo",
    "LeaveType",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveStatus",
    "DayType",
    "HalfDayPosition",
    "Payslip",
    "PayslipStatus",
    "CalendarEvent",
    "EventType",
    "AuditLog",
]
