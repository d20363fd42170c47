from sqlalchemy import Column, Integer, Numeric, Boolean, ForeignKey, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base

class SalaryInfo(Base):
    __tablename__ = "salary_info"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), unique=True, nullable=False)
    basic_salary = Column(Numeric(12, 2), nullable=False, default=0)
    allowances = Column(Numeric(12, 2), nullable=False, default=0)
    cpf_applicable = Column(Boolean, default=True, nullable=False)
    # Informational overrides captured by the profile form; payroll uses the age-tier table
    cpf_employee_rate = Column(Numeric(5, 2), nullable=True)
    cpf_employer_rate = Column(Numeric(5, 2), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee", back_populates="salary_info")
