"""
Leave Router

HTTP endpoints for the leave request lifecycle and balances.
All business logic is delegated to LeaveService.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.leave_request import LeaveStatus
from app.routers.auth_deps import get_current_actor, require_admin
from app.schemas.auth import Actor
from app.schemas.leave import (
    LeaveBalanceSummary,
    LeaveDecision,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveRequestUpdate,
    RolloverRequest,
    RolloverResponse,
)
from app.services.leave_rollover import LeaveRolloverService
from app.services.leave_service import LeaveService

router = APIRouter(
    prefix="/leave",
    tags=["leave"]
)


def _enum_value(value):
    return value.value if value is not None else None


@router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return LeaveService(db, actor).submit(
        leave_type_id=payload.leave_type_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        day_type=_enum_value(payload.day_type),
        half_day_position=_enum_value(payload.half_day_position),
        reason=payload.reason,
    )


@router.get("", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    status_filter: Optional[LeaveStatus] = Query(default=None, alias="status"),
    employee_id: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Staff see their own requests; managers, HR and admins see all."""
    return LeaveService(db, actor).list_requests(
        status=_enum_value(status_filter), employee_id=employee_id, year=year
    )


@router.get("/balances", response_model=List[LeaveBalanceSummary])
def get_leave_balances(
    employee_id: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return LeaveService(db, actor).balance_summary(employee_id=employee_id, year=year)


@router.post("/rollover", response_model=RolloverResponse)
def rollover_leave(
    payload: RolloverRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin())
):
    """Carry unused leave of carry-over types into the next year."""
    return LeaveRolloverService(db).rollover(payload.from_year, actor)


@router.get("/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return LeaveService(db, actor).get(request_id)


@router.patch("/{request_id}", response_model=LeaveRequestResponse)
def edit_leave_request(
    request_id: int,
    payload: LeaveRequestUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return LeaveService(db, actor).edit(
        request_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        day_type=_enum_value(payload.day_type),
        half_day_position=_enum_value(payload.half_day_position),
        reason=payload.reason,
    )


@router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
def approve_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return LeaveService(db, actor).approve(request_id)


@router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
def reject_leave_request(
    request_id: int,
    payload: Optional[LeaveDecision] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return LeaveService(db, actor).reject(request_id, reason=payload.reason if payload else None)


@router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
def cancel_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return LeaveService(db, actor).cancel(request_id)


@router.post("/{request_id}/reset", response_model=LeaveRequestResponse)
def reset_leave_request(
    request_id: int,
    payload: Optional[LeaveDecision] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Send an approved or rejected request back to pending."""
    return LeaveService(db, actor).reset(request_id, reason=payload.reason if payload else None)
