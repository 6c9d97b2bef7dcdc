from pydantic import BaseModel, Field
from typing import Optional


class CompanySettings(BaseModel):
    company_name: str
    geofencing_enabled: bool
    geo_lat: Optional[float] = None
    geo_lon: Optional[float] = None
    geo_radius: float

    class Config:
        from_attributes = True


class CompanySettingsUpdate(BaseModel):
    company_name: Optional[str] = None
    geofencing_enabled: Optional[bool] = None
    geo_lat: Optional[float] = Field(None, ge=-90, le=90)
    geo_lon: Optional[float] = Field(None, ge=-180, le=180)
    geo_radius: Optional[float] = Field(None, gt=0)


class AdminStats(BaseModel):
    active_employees: int
    clocked_in_today: int
    punches_today: int
    pending_corrections: int
