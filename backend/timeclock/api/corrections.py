"""Corrections API: employees flag a punch, admins approve or deny."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timeclock.core.clock import Clock, get_clock
from timeclock.core.database import get_db
from timeclock.core.security import get_current_employee, require_admin
from timeclock.models.employee import Employee
from timeclock.schemas.correction import (
    Correction as CorrectionOut, CorrectionCreate, CorrectionDecision, CorrectionWithDetails,
)
from timeclock.schemas.punch import Punch as PunchOut
from timeclock.services.corrections import CorrectionService
from timeclock.services.employee_directory import EmployeeDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["corrections"])


@router.post("/corrections")
def request_correction(
    body: CorrectionCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    correction = CorrectionService(db, clock).request_correction(
        current_employee.id, body.punch_id, body.note
    )
    return {"correction": CorrectionOut.model_validate(correction)}


@router.get("/corrections")
def my_corrections(
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    corrections = CorrectionService(db, clock).list_by_employee(current_employee.id)
    return {"corrections": [CorrectionOut.model_validate(c) for c in corrections]}


# ── Admin ────────────────────────────────────────────────────────────

@router.get("/admin/corrections")
def admin_list_corrections(
    status: Optional[str] = None,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """All corrections with employee name and the punch as it is now (admin only)."""
    require_admin(current_employee)

    service = CorrectionService(db, clock)
    names = {e.id: e.name for e in EmployeeDirectory(db).list_all()}
    results = []
    for c in service.list_all(status):
        punch = service.referenced_punch(c)
        results.append(CorrectionWithDetails(
            **CorrectionOut.model_validate(c).model_dump(),
            employee_name=names.get(c.employee_id),
            punch=PunchOut.model_validate(punch) if punch else None,
        ))
    return {"corrections": results}


@router.put("/admin/corrections/{correction_id}")
def admin_decide_correction(
    correction_id: int,
    body: CorrectionDecision,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Approve or deny. Denial needs a note. The punch is not modified."""
    require_admin(current_employee)

    correction = CorrectionService(db, clock).decide(
        correction_id, body.status, body.admin_note, decided_by=current_employee.id
    )
    return {"correction": CorrectionOut.model_validate(correction)}
