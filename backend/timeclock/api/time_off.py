"""Time-off API: requests, the shared calendar and admin decisions."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timeclock.core.clock import Clock, get_clock
from timeclock.core.database import get_db
from timeclock.core.security import get_current_employee, require_admin
from timeclock.models.employee import Employee
from timeclock.schemas.time_off import (
    TimeOffCreate, TimeOffDecision, TimeOffRequest as TimeOffOut, TimeOffRequestWithEmployee,
)
from timeclock.services.employee_directory import EmployeeDirectory
from timeclock.services.time_off import TimeOffService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["time-off"])


def _with_names(db: Session, requests):
    names = {e.id: e.name for e in EmployeeDirectory(db).list_all()}
    return [
        TimeOffRequestWithEmployee(
            **TimeOffOut.model_validate(r).model_dump(),
            employee_name=names.get(r.employee_id),
        )
        for r in requests
    ]


@router.post("/time-off")
def request_time_off(
    body: TimeOffCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    request = TimeOffService(db, clock).request_time_off(current_employee.id, **body.model_dump())
    return {"request": TimeOffOut.model_validate(request)}


@router.get("/time-off/mine")
def my_time_off(
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    requests = TimeOffService(db, clock).list_by_employee(current_employee.id)
    return {"requests": [TimeOffOut.model_validate(r) for r in requests]}


@router.get("/time-off/calendar")
def time_off_calendar(
    start_date: date,
    end_date: date,
    status: Optional[str] = None,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Every request overlapping [start_date, end_date], for calendar views."""
    requests = TimeOffService(db, clock).requests_overlapping(start_date, end_date, status=status)
    return {"requests": _with_names(db, requests)}


@router.delete("/time-off/{request_id}")
def delete_time_off(
    request_id: int,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    TimeOffService(db, clock).delete_request(request_id, current_employee)
    return {"id": request_id, "message": "Request deleted successfully"}


# ── Admin ────────────────────────────────────────────────────────────

@router.get("/admin/time-off")
def admin_list_time_off(
    status: Optional[str] = None,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    require_admin(current_employee)

    requests = TimeOffService(db, clock).list_all(status)
    return {"requests": _with_names(db, requests)}


@router.patch("/admin/time-off/{request_id}")
def admin_decide_time_off(
    request_id: int,
    body: TimeOffDecision,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Approve or deny a pending request. Decisions are final (admin only)."""
    require_admin(current_employee)

    request = TimeOffService(db, clock).decide(
        request_id, body.status, processed_by=current_employee.id, admin_response=body.admin_response
    )
    return {"request": TimeOffOut.model_validate(request)}
