"""Time-off requests: whole days or a partial day, with admin approval."""
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Date, Text
from sqlalchemy.orm import relationship
from timeclock.core.database import Base


class TimeOffType(str, enum.Enum):
    VACATION = "vacation"
    SICK = "sick"
    PERSONAL = "personal"
    OTHER = "other"


class TimeOffStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)

    # Inclusive date range
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)

    # Partial day: start_date == end_date and both times set ("HH:MM")
    is_partial_day = Column(Boolean, default=False, nullable=False)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)

    type = Column(String, nullable=False)
    reason = Column(Text, nullable=True)
    request_date = Column(DateTime, nullable=False)

    status = Column(String, default=TimeOffStatus.PENDING.value, nullable=False, index=True)

    # Set together with status, never changed afterwards
    admin_response = Column(Text, nullable=True)
    processed_date = Column(DateTime, nullable=True)
    processed_by = Column(Integer, ForeignKey("employees.id"), nullable=True)

    # Relationships
    employee = relationship("Employee", foreign_keys=[employee_id])
    processed_by_employee = relationship("Employee", foreign_keys=[processed_by])
