"""
Payroll Router

Handles HTTP endpoints for payroll operations.
All business logic is delegated to the payroll service layer.
"""
import secrets
from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.config import settings
from app.core.limiter import limiter
from app.database import get_db
from app.routers.auth_deps import get_current_actor, require_payroll_admin
from app.schemas.auth import Actor
from app.schemas.payroll import (
    PayrollBreakdownResponse,
    PayrollCalculateRequest,
    PayrollGenerateRequest,
    PayrollRunResponse,
    PayslipResponse,
)
from app.services import payroll_service
from app.services.cpf_calculator import calculate_payroll

router = APIRouter(
    prefix="/payroll",
    tags=["payroll"]
)


@router.post("/generate", response_model=PayrollRunResponse)
@limiter.limit("10/minute")
def generate_payroll(
    request: Request,
    payload: PayrollGenerateRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_payroll_admin())
):
    """
    Generate payslips for all active employees for a month.
    Re-running a month only creates the missing payslips.
    """
    return payroll_service.generate_payroll(db, payload.month, payload.year)


def verify_cron_secret(authorization: Optional[str] = Header(default=None)):
    expected = settings.payroll.cron_secret
    if not expected:
        if settings.environment in ("development", "testing"):
            return
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Cron trigger is not configured")
    if not authorization or not secrets.compare_digest(authorization, f"Bearer {expected}"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.get("/cron", response_model=PayrollRunResponse, dependencies=[Depends(verify_cron_secret)])
def scheduled_payroll(db: Session = Depends(get_db)):
    """Scheduled trigger: generates the current month."""
    today = date.today()
    return payroll_service.generate_payroll(db, today.month, today.year, today=today)


@router.post("/calculate", response_model=PayrollBreakdownResponse)
def preview_payroll(
    payload: PayrollCalculateRequest,
    actor: Actor = Depends(require_payroll_admin())
):
    """Calculate a payslip breakdown without saving it."""
    return calculate_payroll(
        payload.basic_salary,
        payload.allowances,
        payload.date_of_birth,
        overtime=payload.overtime,
        bonus=payload.bonus,
        other_deductions=payload.other_deductions,
        income_tax_rate=settings.payroll.income_tax_rate,
        ytd_ordinary_wage=payload.ytd_ordinary_wage,
        ow_ceiling=settings.payroll.ow_ceiling,
        annual_ceiling=settings.payroll.annual_ceiling,
        cpf_applicable=payload.cpf_applicable,
    )


@router.get("/payslips", response_model=List[PayslipResponse])
def list_payslips(
    employee_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Payslip history. Defaults to the caller's own payslips."""
    target_id = employee_id if employee_id is not None else actor.employee_id
    if target_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="employee_id is required")
    return payroll_service.get_employee_payslip_history(db, target_id, actor)


@router.get("/payslips/{payslip_id}", response_model=PayslipResponse)
def get_payslip(
    payslip_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    return payroll_service.get_payslip_details(db, payslip_id, actor)
