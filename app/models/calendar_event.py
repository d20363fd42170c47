from sqlalchemy import Column, Integer, String, Date, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum

class EventType(str, enum.Enum):
    HOLIDAY = "HOLIDAY"
    MEETING = "MEETING"
    TRAINING = "TRAINING"
    COMPANY_EVENT = "COMPANY_EVENT"
    LEAVE = "LEAVE"

LEAVE_EVENT_COLOR = "#f59e0b"

class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    all_day = Column(Boolean, default=True)
    type = Column(String(50), default=EventType.COMPANY_EVENT.value)
    color = Column(String(20), nullable=True)
    leave_request_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="CASCADE"), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    leave_request = relationship("LeaveRequest", back_populates="calendar_event")
