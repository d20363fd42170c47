from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional

from app.core.schemas import JsonDecimal
from app.models.leave_request import DayType, HalfDayPosition


class LeaveRequestCreate(BaseModel):
    leave_type_id: int
    start_date: date
    end_date: date
    day_type: Optional[DayType] = None
    half_day_position: Optional[HalfDayPosition] = None
    reason: Optional[str] = Field(default=None, max_length=1000)


class LeaveRequestUpdate(BaseModel):
    start_date: date
    end_date: date
    day_type: Optional[DayType] = None
    half_day_position: Optional[HalfDayPosition] = None
    reason: Optional[str] = Field(default=None, max_length=1000)


class LeaveDecision(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)


class LeaveTypeBrief(BaseModel):
    id: int
    code: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    leave_type_id: int
    leave_type: Optional[LeaveTypeBrief] = None
    start_date: date
    end_date: date
    days: JsonDecimal
    day_type: str
    half_day_position: Optional[str] = None
    reason: Optional[str] = None
    status: str
    approver_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LeaveBalanceSummary(BaseModel):
    leave_type_id: int
    leave_type_code: str
    leave_type_name: str
    year: int
    entitlement: JsonDecimal
    carried_over: JsonDecimal
    used: JsonDecimal
    pending: JsonDecimal
    available: JsonDecimal
    rejected_count: int


class RolloverRequest(BaseModel):
    from_year: int = Field(alias="fromYear")

    model_config = ConfigDict(populate_by_name=True)


class RolloverEntry(BaseModel):
    employee_id: int
    employee_name: str
    leave_type_code: str
    carried_over: JsonDecimal
    warning: Optional[str] = None


class RolloverResponse(BaseModel):
    from_year: int
    to_year: int
    processed: int
    results: List[RolloverEntry]
