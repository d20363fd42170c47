from sqlalchemy import Column, Integer, String, Numeric, Boolean
from app.database import Base

# Leave type codes with special handling in the engine
ANNUAL_LEAVE = "AL"
MEDICAL_LEAVE = "MC"

PRORATED_CODES = (ANNUAL_LEAVE, MEDICAL_LEAVE)
HALF_DAY_CODES = (ANNUAL_LEAVE,)

class LeaveType(Base):
    __tablename__ = "leave_types"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(10), unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    default_days = Column(Numeric(6, 1), nullable=False, default=0)
    is_paid = Column(Boolean, default=True, nullable=False)
    carry_over = Column(Boolean, default=False, nullable=False)
    max_carry_over = Column(Numeric(6, 1), default=0, nullable=False)  # 0 = no cap

    @property
    def is_prorated(self) -> bool:
        return self.code in PRORATED_CODES

    @property
    def supports_half_day(self) -> bool:
        return self.code in HALF_DAY_CODES

    def __repr__(self):
        return f"<LeaveType {self.code}>"
