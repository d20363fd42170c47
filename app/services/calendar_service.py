from typing import Optional

from app.models.calendar_event import CalendarEvent, EventType, LEAVE_EVENT_COLOR
from app.models.leave_request import LeaveRequest
from app.services.base import BaseService


class CalendarService(BaseService):
    """Shared-calendar entries mirroring approved leave."""

    def create_leave_event(self, leave: LeaveRequest) -> CalendarEvent:
        existing = self.find_leave_event(leave.id)
        if existing:
            return existing

        event = CalendarEvent(
            title=f"{leave.employee.name} — {leave.leave_type.name}",
            start_date=leave.start_date,
            end_date=leave.end_date,
            all_day=True,
            type=EventType.LEAVE.value,
            color=LEAVE_EVENT_COLOR,
            leave_request_id=leave.id,
        )
        self.db.add(event)
        return event

    def find_leave_event(self, leave_request_id: int) -> Optional[CalendarEvent]:
        return self.db.query(CalendarEvent).filter(CalendarEvent.leave_request_id == leave_request_id).first()

    def delete_leave_event(self, leave: LeaveRequest) -> bool:
        event = self.find_leave_event(leave.id)
        if not event:
            return False
        self.db.delete(event)
        return True
