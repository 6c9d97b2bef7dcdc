"""Company settings API. The kiosk reads them, admins update the geofence."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timeclock.core.database import commit_or_raise, get_db
from timeclock.core.exceptions import ValidationError
from timeclock.core.security import get_current_employee, require_admin
from timeclock.models.employee import Employee
from timeclock.schemas.settings import CompanySettings as CompanySettingsOut, CompanySettingsUpdate
from timeclock.services.geofence import get_company_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["settings"])


@router.get("/settings")
def read_settings(db: Session = Depends(get_db)):
    company = get_company_settings(db)
    return {"settings": CompanySettingsOut.model_validate(company)}


@router.put("/admin/settings")
def update_settings(
    body: CompanySettingsUpdate,
    current_employee: Employee = Depends(get_current_employee),
    db: Session = Depends(get_db),
):
    require_admin(current_employee)

    company = get_company_settings(db)
    changes = body.model_dump(exclude_unset=True)

    if "company_name" in changes and not (changes["company_name"] or "").strip():
        raise ValidationError("Company name cannot be empty")
    if changes.get("geo_radius", 1) is None:
        raise ValidationError("Geofence radius cannot be empty")

    for key, value in changes.items():
        setattr(company, key, value)

    if company.geofencing_enabled and (company.geo_lat is None or company.geo_lon is None):
        raise ValidationError("Set a geofence center (latitude and longitude) before enabling geofencing")

    commit_or_raise(db, "update settings")
    db.refresh(company)
    logger.info(
        f"Settings updated by employee_id={current_employee.id}: geofencing={company.geofencing_enabled} "
        f"center=({company.geo_lat}, {company.geo_lon}) radius={company.geo_radius}m"
    )
    return {"settings": CompanySettingsOut.model_validate(company)}
