from decimal import Decimal
from typing import Any, Dict, List, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationFailedError(AppException):
    """Malformed or missing input. Named to avoid clashing with FastAPI's RequestValidationError."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_FAILED",
            details={"details": details} if details else None
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )

class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class LeaveStateError(AppException):
    """The request is not in the status the operation requires."""
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_STATE"
        )

class InsufficientBalanceError(AppException):
    def __init__(self, available: Decimal, requested: Decimal):
        self.available = available
        self.requested = requested
        super().__init__(
            message="Insufficient leave balance",
            status_code=400,
            error_code="INSUFFICIENT_BALANCE",
            details={"available": float(available), "requested": float(requested)}
        )

class LeaveConflictError(AppException):
    def __init__(self, conflict_dates: List[str]):
        self.conflict_dates = conflict_dates
        super().__init__(
            message=(
                f"Leave overlaps with existing request on: {', '.join(conflict_dates)}. "
                "Please choose different dates."
            ),
            status_code=400,
            error_code="LEAVE_CONFLICT",
            details={"details": {"conflict_dates": conflict_dates}}
        )

class ConcurrentUpdateError(AppException):
    def __init__(self, message: str = "The record was modified by another request. Please retry."):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONCURRENT_UPDATE"
        )

class LedgerIntegrityError(AppException):
    """A balance delta would leave used or pending below zero."""
    def __init__(self, message: str = "Leave balance is out of sync with its requests"):
        super().__init__(
            message=message,
            status_code=500,
            error_code="LEDGER_INTEGRITY"
        )
