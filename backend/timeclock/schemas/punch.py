from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime


class PunchCreate(BaseModel):
    punch_type: str
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    flagged: bool = False  # client-side hint, e.g. location permission denied


class ManualPunchCreate(BaseModel):
    employee_id: int
    punch_type: str
    timestamp: datetime
    flagged: bool = False


class PunchUpdate(BaseModel):
    timestamp: Optional[datetime] = None
    punch_type: Optional[str] = None
    flagged: Optional[bool] = None


class Punch(BaseModel):
    id: int
    employee_id: int
    punch_type: str
    timestamp: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    ip_address: str
    flagged: bool
    is_manual: bool = False

    class Config:
        from_attributes = True


class PunchWithEmployee(Punch):
    employee_name: Optional[str] = None


class PunchStatus(BaseModel):
    clocked_in: bool
    last_punch: Optional[Punch] = None


class DaySummary(BaseModel):
    day: date
    label: str
    hours_worked: float
    break_time_minutes: float
    is_today: bool

    class Config:
        from_attributes = True


class WeekSummary(BaseModel):
    employee_id: int
    week_start: date
    days: List[DaySummary]
    total_hours: float
