from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime


class TimeOffCreate(BaseModel):
    start_date: date
    end_date: date
    type: str
    is_partial_day: bool = False
    start_time: Optional[str] = None  # "HH:MM"
    end_time: Optional[str] = None
    reason: Optional[str] = None


class TimeOffDecision(BaseModel):
    status: str  # "approved" / "denied"
    admin_response: Optional[str] = None


class TimeOffRequest(BaseModel):
    id: int
    employee_id: int
    start_date: date
    end_date: date
    is_partial_day: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    type: str
    reason: Optional[str] = None
    request_date: datetime
    status: str
    admin_response: Optional[str] = None
    processed_date: Optional[datetime] = None
    processed_by: Optional[int] = None

    class Config:
        from_attributes = True


class TimeOffRequestWithEmployee(TimeOffRequest):
    employee_name: Optional[str] = None
