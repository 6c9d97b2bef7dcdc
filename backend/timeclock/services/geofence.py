"""Geofence evaluation for punches.

A punch outside the company radius, or one made without a device location
while geofencing is on, is *flagged* for admin review. It is never rejected.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from timeclock.core.config import settings
from timeclock.models.company_settings import CompanySettings

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6371000  # mean Earth radius


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance in meters between two GPS coordinates."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def is_within_geofence(
    current_lat: float,
    current_lon: float,
    center_lat: float,
    center_lon: float,
    radius_meters: float,
) -> bool:
    return haversine_distance(current_lat, current_lon, center_lat, center_lon) <= radius_meters


@dataclass
class GeofenceResult:
    flagged: bool
    reason: Optional[str] = None  # "location_unavailable" / "outside_geofence"
    distance_meters: Optional[float] = None


def evaluate_punch_location(
    company: Optional[CompanySettings],
    latitude: Optional[float],
    longitude: Optional[float],
) -> GeofenceResult:
    """Apply the flagging policy for a punch attempt.

    Geofencing off -> never flagged by location. On -> flagged when the device
    gave no coordinates, or when they fall outside the radius. With no center
    configured only the missing-location rule can apply.
    """
    if company is None or not company.geofencing_enabled:
        return GeofenceResult(flagged=False)

    if latitude is None or longitude is None:
        return GeofenceResult(flagged=True, reason="location_unavailable")

    if company.geo_lat is None or company.geo_lon is None:
        logger.warning("Geofencing enabled without a center point; location not checked")
        return GeofenceResult(flagged=False)

    radius = company.geo_radius or settings.DEFAULT_GEOFENCE_RADIUS_METERS
    if is_within_geofence(latitude, longitude, company.geo_lat, company.geo_lon, radius):
        return GeofenceResult(flagged=False)
    distance = haversine_distance(latitude, longitude, company.geo_lat, company.geo_lon)
    return GeofenceResult(flagged=True, reason="outside_geofence", distance_meters=distance)


def find_company_settings(db: Session) -> Optional[CompanySettings]:
    """The settings row if it exists. Never writes."""
    return db.query(CompanySettings).filter(CompanySettings.id == 1).first()


def get_company_settings(db: Session) -> CompanySettings:
    """Return the settings row, creating it with defaults on first use."""
    company = find_company_settings(db)
    if company is None:
        company = CompanySettings(
            id=1,
            company_name=settings.DEFAULT_COMPANY_NAME,
            geofencing_enabled=False,
            geo_radius=settings.DEFAULT_GEOFENCE_RADIUS_METERS,
        )
        db.add(company)
        db.flush()
    return company
