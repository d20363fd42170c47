from sqlalchemy import Column, Integer, String, Date, Numeric, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum

class PayslipStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    GENERATED = "GENERATED"
    PAID = "PAID"

class Payslip(Base):
    __tablename__ = "payslips"
    # One payslip per employee and pay period; the batch generator relies on it for idempotency
    __table_args__ = (
        UniqueConstraint("employee_id", "pay_period_start", "pay_period_end", name="uq_payslip_employee_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), index=True, nullable=False)
    pay_period_start = Column(Date, nullable=False)
    pay_period_end = Column(Date, nullable=False)
    payment_date = Column(Date, nullable=True)

    basic_salary = Column(Numeric(12, 2), nullable=False)
    allowances = Column(Numeric(12, 2), default=0)
    overtime = Column(Numeric(12, 2), default=0)
    bonus = Column(Numeric(12, 2), default=0)
    gross_salary = Column(Numeric(12, 2), nullable=False)
    cpf_employee = Column(Numeric(12, 2), default=0)
    cpf_employer = Column(Numeric(12, 2), default=0)
    income_tax = Column(Numeric(12, 2), default=0)
    other_deductions = Column(Numeric(12, 2), default=0)
    total_deductions = Column(Numeric(12, 2), default=0)
    net_salary = Column(Numeric(12, 2), nullable=False)

    status = Column(String, default=PayslipStatus.GENERATED.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee", back_populates="payslips")
