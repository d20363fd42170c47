from pydantic import BaseModel, ConfigDict
from typing import Optional
import enum


class UserRole(str, enum.Enum):
    """
    Roles carried in the access token.

    - ADMIN: Full access, including year-end rollover
    - HR: Payroll and leave administration
    - MANAGER: Leave approvals
    - STAFF: Self-service access
    """
    ADMIN = "ADMIN"
    HR = "HR"
    MANAGER = "MANAGER"
    STAFF = "STAFF"


APPROVER_ROLES = (UserRole.MANAGER, UserRole.HR, UserRole.ADMIN)
PAYROLL_ROLES = (UserRole.HR, UserRole.ADMIN)


class Actor(BaseModel):
    """
    The authenticated caller, passed explicitly into every engine operation.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    employee_id: Optional[int] = None

    @property
    def can_approve(self) -> bool:
        return self.role in APPROVER_ROLES

    @property
    def is_payroll_admin(self) -> bool:
        return self.role in PAYROLL_ROLES

    def owns(self, employee_id: int) -> bool:
        return self.employee_id is not None and self.employee_id == employee_id


class TokenData(BaseModel):
    sub: Optional[str] = None
    role: Optional[str] = None
    employee_id: Optional[int] = None
