"""Employee lookups and admin-side employee management.

PINs are 4-6 digits and unique among active employees.
"""
import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from timeclock.core.database import commit_or_raise
from timeclock.core.exceptions import ConflictError, NotFoundError, ValidationError
from timeclock.models.employee import Employee
from timeclock.models.punch import Punch

logger = logging.getLogger(__name__)

PIN_RE = re.compile(r"^\d{4,6}$")
PROFILE_FIELDS = ("name", "email", "phone", "birthday", "photo_url")
ADMIN_FIELDS = PROFILE_FIELDS + ("pin", "is_active", "is_admin")


def validate_pin(pin: str) -> str:
    pin = (pin or "").strip()
    if not PIN_RE.match(pin):
        raise ValidationError("Invalid PIN format (4-6 digits)")
    return pin


class EmployeeDirectory:

    def __init__(self, db: Session):
        self.db = db

    def get(self, employee_id: int) -> Employee:
        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def find_by_pin(self, pin: str) -> Optional[Employee]:
        """Active employee holding this PIN, if any."""
        pin = validate_pin(pin)
        return (
            self.db.query(Employee)
            .filter(Employee.pin == pin, Employee.is_active == True)
            .first()
        )

    def list_all(self) -> List[Employee]:
        return self.db.query(Employee).order_by(Employee.name).all()

    def create(self, name: str, pin: str, is_admin: bool = False, is_active: bool = True, **profile) -> Employee:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Employee name is required")
        pin = validate_pin(pin)
        if is_active:
            self._ensure_pin_free(pin)

        employee = Employee(
            name=name,
            pin=pin,
            is_admin=bool(is_admin),
            is_active=bool(is_active),
            **{k: v for k, v in profile.items() if k in PROFILE_FIELDS},
        )
        self.db.add(employee)
        commit_or_raise(self.db, "create employee")
        self.db.refresh(employee)
        logger.info(f"Employee {employee.id} created ({employee.name}, admin={employee.is_admin})")
        return employee

    def update(self, employee_id: int, **fields) -> Employee:
        """Admin update. Only non-None fields are applied."""
        unknown = set(fields) - set(ADMIN_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit employee field(s): {', '.join(sorted(unknown))}")

        employee = self.get(employee_id)
        changes = {k: v for k, v in fields.items() if v is not None}

        if "name" in changes and not str(changes["name"]).strip():
            raise ValidationError("Employee name is required")
        if "pin" in changes:
            changes["pin"] = validate_pin(changes["pin"])

        will_be_active = changes.get("is_active", employee.is_active)
        new_pin = changes.get("pin", employee.pin)
        if will_be_active and (new_pin != employee.pin or not employee.is_active):
            self._ensure_pin_free(new_pin, exclude_id=employee.id)

        for key, value in changes.items():
            setattr(employee, key, value)
        commit_or_raise(self.db, "update employee")
        self.db.refresh(employee)
        logger.info(f"Employee {employee_id} updated: {sorted(k for k in changes if k != 'pin')}")
        return employee

    def update_profile(
        self,
        employee_id: int,
        current_pin: Optional[str] = None,
        new_pin: Optional[str] = None,
        **profile,
    ) -> Employee:
        """Employee self-service. Changing the PIN requires the current one."""
        employee = self.get(employee_id)
        fields = {k: v for k, v in profile.items() if k in PROFILE_FIELDS and v is not None}
        if new_pin:
            if not current_pin or current_pin != employee.pin:
                raise ValidationError("Current PIN is incorrect")
            fields["pin"] = new_pin
        return self.update(employee_id, **fields)

    def delete(self, employee_id: int) -> bool:
        """Remove an employee with no punch history. Others must be deactivated."""
        employee = self.get(employee_id)
        has_punches = self.db.query(Punch.id).filter(Punch.employee_id == employee_id).first()
        if has_punches:
            raise ConflictError("Employee has punch history; deactivate instead of deleting")
        self.db.delete(employee)
        commit_or_raise(self.db, "delete employee")
        logger.info(f"Employee {employee_id} deleted")
        return True

    def _ensure_pin_free(self, pin: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Employee.id).filter(Employee.pin == pin, Employee.is_active == True)
        if exclude_id is not None:
            query = query.filter(Employee.id != exclude_id)
        if query.first():
            raise ConflictError("PIN is already in use")
