from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from timeclock.schemas.punch import Punch


class CorrectionCreate(BaseModel):
    punch_id: Optional[int] = None
    note: str


class CorrectionDecision(BaseModel):
    status: str  # "approved" / "denied"
    admin_note: Optional[str] = None


class Correction(BaseModel):
    id: int
    employee_id: int
    punch_id: Optional[int] = None
    date: datetime
    note: str
    status: str
    admin_note: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None

    class Config:
        from_attributes = True


class CorrectionWithDetails(Correction):
    employee_name: Optional[str] = None
    punch: Optional[Punch] = None  # current state; None if the punch was deleted
