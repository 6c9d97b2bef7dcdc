"""Admin API: employee management and dashboard stats."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timeclock.core.clock import Clock, get_clock
from timeclock.core.database import get_db
from timeclock.core.security import get_current_employee, require_admin
from timeclock.models.employee import Employee
from timeclock.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeWithPin
from timeclock.schemas.settings import AdminStats
from timeclock.services.employee_directory import EmployeeDirectory
from timeclock.services.stats import StatsService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


# ── Employees ────────────────────────────────────────────────────────

@router.get("/employees")
def list_employees(
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
):
    require_admin(current_employee)
    employees = EmployeeDirectory(db).list_all()
    return {"employees": [EmployeeWithPin.model_validate(e) for e in employees]}


@router.post("/employees")
def create_employee(
    body: EmployeeCreate,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
):
    require_admin(current_employee)
    employee = EmployeeDirectory(db).create(**body.model_dump())
    logger.info(f"Employee {employee.id} created by admin employee_id={current_employee.id}")
    return {"employee": EmployeeWithPin.model_validate(employee)}


@router.put("/employees/{employee_id}")
def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
):
    require_admin(current_employee)
    employee = EmployeeDirectory(db).update(employee_id, **body.model_dump(exclude_unset=True))
    return {"employee": EmployeeWithPin.model_validate(employee)}


@router.delete("/employees/{employee_id}")
def delete_employee(
    employee_id: int,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
):
    """Delete an employee without punches. Employees with history are deactivated instead."""
    require_admin(current_employee)
    EmployeeDirectory(db).delete(employee_id)
    return {"id": employee_id, "message": "Employee deleted successfully"}


# ── Dashboard ────────────────────────────────────────────────────────

@router.get("/stats", response_model=AdminStats)
def admin_stats(
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    require_admin(current_employee)
    return AdminStats(**StatsService(db, clock).get_admin_stats())
