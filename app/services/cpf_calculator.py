"""
Statutory (CPF) contribution and payslip arithmetic.

All amounts are Decimal. The employee share is always floored to the dollar;
the combined contribution is rounded half up; the employer share is the
difference, so both shares always reconcile to the rounded total.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional

from app.core.numbers import Number, ZERO, as_decimal

# Monthly Ordinary Wage ceiling
OW_CEILING = Decimal("8000")

# Annual wage ceiling
ANNUAL_CEILING = Decimal("102000")

DEFAULT_INCOME_TAX_RATE = Decimal("0.15")

_WHOLE_DOLLAR = Decimal("1")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class CPFRates:
    employee: Decimal
    employer: Decimal

    @property
    def total(self) -> Decimal:
        return self.employee + self.employer


# (max age inclusive, employee %, employer %)
_AGE_TIERS = (
    (55, CPFRates(Decimal("20"), Decimal("17"))),
    (60, CPFRates(Decimal("18"), Decimal("16"))),
    (65, CPFRates(Decimal("12.5"), Decimal("12.5"))),
    (70, CPFRates(Decimal("7.5"), Decimal("9"))),
)
_ABOVE_70 = CPFRates(Decimal("5"), Decimal("7.5"))


@dataclass(frozen=True)
class CPFResult:
    employee_contribution: Decimal
    employer_contribution: Decimal
    total_contribution: Decimal
    gross_wage: Decimal


@dataclass(frozen=True)
class PayrollBreakdown:
    basic_salary: Decimal
    allowances: Decimal
    overtime: Decimal
    bonus: Decimal
    gross_salary: Decimal
    cpf_employee: Decimal
    cpf_employer: Decimal
    income_tax: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    net_salary: Decimal


def get_cpf_rates(age: int) -> CPFRates:
    """Contribution rates by age. Boundary ages belong to the lower tier."""
    for max_age, rates in _AGE_TIERS:
        if age <= max_age:
            return rates
    return _ABOVE_70


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Completed years; one less if this year's birthday has not happened yet."""
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def calculate_cpf(
    ordinary_wage: Number,
    additional_wage: Number,
    age: int,
    ytd_ordinary_wage: Number = 0,
    ow_ceiling: Decimal = OW_CEILING,
    annual_ceiling: Decimal = ANNUAL_CEILING,
) -> CPFResult:
    """
    Args:
        ordinary_wage: Monthly basic salary + allowances
        additional_wage: Bonus, overtime and other irregular pay
        age: Employee's age in completed years
        ytd_ordinary_wage: Ordinary wage already subject to contribution this year
    """
    rates = get_cpf_rates(age)

    capped_ow = min(as_decimal(ordinary_wage), ow_ceiling)

    aw_ceiling = max(annual_ceiling - as_decimal(ytd_ordinary_wage) - capped_ow, ZERO)
    capped_aw = min(as_decimal(additional_wage), aw_ceiling)

    total_wage = capped_ow + capped_aw

    total_contribution = (total_wage * rates.total / _HUNDRED).quantize(_WHOLE_DOLLAR, rounding=ROUND_HALF_UP)
    employee_contribution = (total_wage * rates.employee / _HUNDRED).quantize(_WHOLE_DOLLAR, rounding=ROUND_FLOOR)
    employer_contribution = total_contribution - employee_contribution

    return CPFResult(
        employee_contribution=employee_contribution,
        employer_contribution=employer_contribution,
        total_contribution=total_contribution,
        gross_wage=total_wage,
    )


def calculate_payroll(
    basic_salary: Number,
    allowances: Number,
    date_of_birth: date,
    overtime: Number = 0,
    bonus: Number = 0,
    other_deductions: Number = 0,
    income_tax_rate: Number = DEFAULT_INCOME_TAX_RATE,
    today: Optional[date] = None,
    ytd_ordinary_wage: Number = 0,
    ow_ceiling: Decimal = OW_CEILING,
    annual_ceiling: Decimal = ANNUAL_CEILING,
    cpf_applicable: bool = True,
) -> PayrollBreakdown:
    """
    Full payslip breakdown for one month. Income tax is a flat rate, rounded
    half up. Employees exempt from contribution (``cpf_applicable=False``)
    pay and receive none.
    """
    basic_salary = as_decimal(basic_salary)
    allowances = as_decimal(allowances)
    overtime = as_decimal(overtime)
    bonus = as_decimal(bonus)
    other_deductions = as_decimal(other_deductions)

    age = calculate_age(date_of_birth, today)
    ordinary_wage = basic_salary + allowances
    additional_wage = overtime + bonus
    gross_salary = ordinary_wage + additional_wage

    if cpf_applicable:
        cpf = calculate_cpf(
            ordinary_wage,
            additional_wage,
            age,
            ytd_ordinary_wage,
            ow_ceiling=ow_ceiling,
            annual_ceiling=annual_ceiling,
        )
    else:
        cpf = CPFResult(
            employee_contribution=ZERO,
            employer_contribution=ZERO,
            total_contribution=ZERO,
            gross_wage=ZERO,
        )

    income_tax = (gross_salary * as_decimal(income_tax_rate)).quantize(_WHOLE_DOLLAR, rounding=ROUND_HALF_UP)

    total_deductions = cpf.employee_contribution + income_tax + other_deductions
    net_salary = gross_salary - total_deductions

    return PayrollBreakdown(
        basic_salary=basic_salary,
        allowances=allowances,
        overtime=overtime,
        bonus=bonus,
        gross_salary=gross_salary,
        cpf_employee=cpf.employee_contribution,
        cpf_employer=cpf.employer_contribution,
        income_tax=income_tax,
        other_deductions=other_deductions,
        total_deductions=total_deductions,
        net_salary=net_salary,
    )
