"""Company-wide settings: a single row (id=1) holding the geofence."""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float
from sqlalchemy.sql import func
from timeclock.core.database import Base


class CompanySettings(Base):
    __tablename__ = "company_settings"

    id = Column(Integer, primary_key=True, default=1)
    company_name = Column(String, nullable=False)

    # Geofence (center + radius in meters)
    geofencing_enabled = Column(Boolean, default=False, nullable=False)
    geo_lat = Column(Float, nullable=True)
    geo_lon = Column(Float, nullable=True)
    geo_radius = Column(Float, nullable=False, default=500.0)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
