"""Auth API: kiosk PIN login, logout and the employee's own profile."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from timeclock.core.database import get_db
from timeclock.core.security import (
    SessionStore, get_current_employee, get_session_store, get_session_token,
)
from timeclock.models.employee import Employee
from timeclock.schemas.employee import Employee as EmployeeOut, LoginRequest, LoginResponse, ProfileUpdate
from timeclock.services.employee_directory import EmployeeDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Exchange a PIN for a session token."""
    employee = EmployeeDirectory(db).find_by_pin(body.pin)
    if not employee:
        logger.warning("Login failed: unknown or inactive PIN")
        raise HTTPException(status_code=401, detail="Invalid PIN")

    token = store.create(employee)
    logger.info(f"Employee {employee.id} logged in")
    return LoginResponse(access_token=token, employee=EmployeeOut.model_validate(employee))


@router.post("/logout")
def logout(
    token: str = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
):
    store.destroy(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
def get_me(current_employee: Employee = Depends(get_current_employee)):
    return {"employee": EmployeeOut.model_validate(current_employee)}


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
):
    """Update own profile. Changing the PIN requires the current PIN."""
    employee = EmployeeDirectory(db).update_profile(current_employee.id, **body.model_dump())
    return {"employee": EmployeeOut.model_validate(employee)}
