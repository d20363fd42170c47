from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.core.schemas import JsonDecimal


class PayrollGenerateRequest(BaseModel):
    month: Optional[int] = None
    year: Optional[int] = None


class PayrollRunResponse(BaseModel):
    created: int
    skipped: int
    errors: int
    message: str
    error_details: Optional[List[Dict[str, Any]]] = None


class PayrollCalculateRequest(BaseModel):
    basic_salary: Decimal = Field(ge=0)
    allowances: Decimal = Field(default=Decimal("0"), ge=0)
    date_of_birth: date
    overtime: Decimal = Field(default=Decimal("0"), ge=0)
    bonus: Decimal = Field(default=Decimal("0"), ge=0)
    other_deductions: Decimal = Field(default=Decimal("0"), ge=0)
    ytd_ordinary_wage: Decimal = Field(default=Decimal("0"), ge=0)
    cpf_applicable: bool = True


class PayrollBreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    basic_salary: JsonDecimal
    allowances: JsonDecimal
    overtime: JsonDecimal
    bonus: JsonDecimal
    gross_salary: JsonDecimal
    cpf_employee: JsonDecimal
    cpf_employer: JsonDecimal
    income_tax: JsonDecimal
    other_deductions: JsonDecimal
    total_deductions: JsonDecimal
    net_salary: JsonDecimal


class PayslipResponse(PayrollBreakdownResponse):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    pay_period_start: date
    pay_period_end: date
    payment_date: Optional[date] = None
    status: str
    created_at: Optional[datetime] = None
