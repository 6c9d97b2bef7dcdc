"""Punch API: kiosk clock in/out, personal history and admin ledger edits.

Rules:
- The kiosk sends only the punch type and (if available) GPS coordinates;
  the server stamps the time and decides the geofence flag.
- A second punch of the same type within 30 seconds is rejected with
  code "duplicate_punch" (HTTP 429) so the kiosk can ask the user to wait.
- Admins can backfill, edit and delete punches. Edits here are the only way
  an approved correction reaches the ledger.
"""
import logging
from datetime import datetime, date, time, timedelta
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from timeclock.core.clock import Clock, get_clock
from timeclock.core.database import get_db
from timeclock.core.security import get_current_employee, require_admin
from timeclock.models.employee import Employee
from timeclock.schemas.punch import (
    ManualPunchCreate, Punch as PunchOut, PunchCreate, PunchStatus,
    PunchUpdate, PunchWithEmployee, WeekSummary, DaySummary as DaySummaryOut,
)
from timeclock.services.employee_directory import EmployeeDirectory
from timeclock.services.external_sync import ExternalSyncService, get_external_sync
from timeclock.services.punch_ledger import PunchLedgerService
from timeclock.services.time_reconstruction import day_summary, start_of_week, week_summary

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["punches"])


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


# ── Clock In / Out ───────────────────────────────────────────────────

@router.post("/punches")
def create_punch(
    body: PunchCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    external_sync: ExternalSyncService = Depends(get_external_sync),
):
    """Record a punch for the logged-in employee."""
    ledger = PunchLedgerService(db, clock)
    punch = ledger.create_punch(
        current_employee.id,
        body.punch_type,
        ip_address=get_client_ip(request),
        latitude=body.latitude,
        longitude=body.longitude,
        flagged_hint=body.flagged,
    )

    # Mirror to the external clock after the response; failures only get logged
    if external_sync.enabled:
        background_tasks.add_task(
            external_sync.sync_punch, current_employee.name, punch.punch_type, punch.timestamp
        )

    verb = "Clocked in" if punch.punch_type == "in" else "Clocked out"
    return {
        "punch": PunchOut.model_validate(punch),
        "message": f"{verb} at {punch.timestamp.strftime('%I:%M %p')}" + (
            " · flagged for review" if punch.flagged else ""
        ),
    }


# ── Current Status ───────────────────────────────────────────────────

@router.get("/punches/last", response_model=PunchStatus)
def get_last_punch(
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Last punch and clocked-in status for the logged-in employee."""
    ledger = PunchLedgerService(db, clock)
    last = ledger.last_punch_for(current_employee.id)
    return PunchStatus(
        clocked_in=last is not None and last.punch_type == "in",
        last_punch=PunchOut.model_validate(last) if last else None,
    )


# ── My History ───────────────────────────────────────────────────────

@router.get("/punches/mine")
def get_my_punches(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Punches for the logged-in employee, newest first."""
    punches = PunchLedgerService(db, clock).list_by_employee(current_employee.id, start, end)
    return {"punches": [PunchOut.model_validate(p) for p in punches]}


@router.get("/punches/summary/today", response_model=DaySummaryOut)
def get_today_summary(
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Hours worked (live while clocked in) and break minutes for today."""
    ledger = PunchLedgerService(db, clock)
    start, end = clock.today_bounds()
    punches = ledger.list_by_employee(current_employee.id, start, end)
    summary = day_summary(
        punches, clock.today(), clock.now(), clocked_in=ledger.is_clocked_in(current_employee.id)
    )
    return DaySummaryOut.model_validate(summary)


@router.get("/punches/summary/week", response_model=WeekSummary)
def get_week_summary(
    week_of: Optional[date] = None,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Per-day hours for the Sunday-Saturday week containing ``week_of`` (default: this week)."""
    return _week_summary(db, clock, current_employee.id, week_of)


# ── Admin: Ledger ────────────────────────────────────────────────────

@router.get("/admin/punches")
def admin_list_punches(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    employee_id: Optional[int] = None,
    flagged: Optional[bool] = Query(None, description="Only flagged (true) or unflagged (false) punches"),
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """All punches in a range, newest first (admin only)."""
    require_admin(current_employee)

    ledger = PunchLedgerService(db, clock)
    if employee_id is not None:
        punches = ledger.list_by_employee(employee_id, start, end)
    else:
        punches = ledger.list_all(start, end)
    if flagged is not None:
        punches = [p for p in punches if p.flagged == flagged]

    names = {e.id: e.name for e in EmployeeDirectory(db).list_all()}
    return {
        "punches": [
            PunchWithEmployee(
                **PunchOut.model_validate(p).model_dump(),
                employee_name=names.get(p.employee_id),
            )
            for p in punches
        ]
    }


@router.post("/admin/punches/manual")
def admin_manual_punch(
    body: ManualPunchCreate,
    request: Request,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Backfill a forgotten punch with an explicit timestamp (admin only)."""
    require_admin(current_employee)

    punch = PunchLedgerService(db, clock).create_manual_punch(
        body.employee_id,
        body.punch_type,
        body.timestamp,
        ip_address=get_client_ip(request),
        flagged=body.flagged,
    )
    return {"punch": PunchOut.model_validate(punch)}


@router.put("/admin/punches/{punch_id}")
def admin_update_punch(
    punch_id: int,
    body: PunchUpdate,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Edit timestamp, type or flag of a punch (admin only)."""
    require_admin(current_employee)

    punch = PunchLedgerService(db, clock).update_punch(punch_id, **body.model_dump(exclude_unset=True))
    return {"punch": PunchOut.model_validate(punch)}


@router.delete("/admin/punches/{punch_id}")
def admin_delete_punch(
    punch_id: int,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Permanently delete a punch (admin only)."""
    require_admin(current_employee)

    PunchLedgerService(db, clock).delete_punch(punch_id)
    logger.info(f"Punch {punch_id} deleted by admin employee_id={current_employee.id}")
    return {"id": punch_id, "message": "Punch deleted successfully"}


@router.get("/admin/employees/{employee_id}/summary/week", response_model=WeekSummary)
def admin_employee_week(
    employee_id: int,
    week_of: Optional[date] = None,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Per-day hours for one employee (admin only)."""
    require_admin(current_employee)

    EmployeeDirectory(db).get(employee_id)
    return _week_summary(db, clock, employee_id, week_of)


# ── Internal Helpers ─────────────────────────────────────────────────

def _week_summary(db: Session, clock: Clock, employee_id: int, week_of: Optional[date]) -> WeekSummary:
    ledger = PunchLedgerService(db, clock)
    week_start = start_of_week(week_of or clock.today())
    start = datetime.combine(week_start, time.min)
    punches = ledger.list_by_employee(employee_id, start, start + timedelta(days=7))

    days = week_summary(punches, week_start, clock.now(), clocked_in=ledger.is_clocked_in(employee_id))
    return WeekSummary(
        employee_id=employee_id,
        week_start=week_start,
        days=[DaySummaryOut.model_validate(d) for d in days],
        total_hours=round(sum(d.hours_worked for d in days), 2),
    )
