from sqlalchemy import Column, Integer, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base

class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type_id", "year", name="uq_leave_balance_employee_type_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), index=True, nullable=False)
    leave_type_id = Column(Integer, ForeignKey("leave_types.id"), index=True, nullable=False)
    year = Column(Integer, nullable=False)
    entitlement = Column(Numeric(6, 1), default=0, nullable=False)
    carried_over = Column(Numeric(6, 1), default=0, nullable=False)
    used = Column(Numeric(6, 1), default=0, nullable=False)
    pending = Column(Numeric(6, 1), default=0, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    # Optimistic locking: every balance delta is a versioned UPDATE
    __mapper_args__ = {"version_id_col": version}

    employee = relationship("Employee", back_populates="leave_balances")
    leave_type = relationship("LeaveType")
