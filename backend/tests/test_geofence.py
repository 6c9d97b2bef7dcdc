import pytest

from timeclock.models import CompanySettings
from timeclock.services.geofence import (
    evaluate_punch_location,
    get_company_settings,
    haversine_distance,
    is_within_geofence,
)

from conftest import OFFICE_LAT, OFFICE_LON

# One degree of latitude on the mean-radius sphere
METERS_PER_DEGREE = 111194.9266


def company(enabled=True, lat=OFFICE_LAT, lon=OFFICE_LON, radius=500.0):
    return CompanySettings(
        id=1,
        company_name="Test Co",
        geofencing_enabled=enabled,
        geo_lat=lat,
        geo_lon=lon,
        geo_radius=radius,
    )


def test_haversine_one_degree_of_latitude():
    assert haversine_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(METERS_PER_DEGREE, abs=0.01)


def test_haversine_is_symmetric():
    a = haversine_distance(OFFICE_LAT, OFFICE_LON, 41.88, -87.63)
    b = haversine_distance(41.88, -87.63, OFFICE_LAT, OFFICE_LON)
    assert a == pytest.approx(b)


def test_same_point_is_inside_tiny_radius():
    assert is_within_geofence(OFFICE_LAT, OFFICE_LON, OFFICE_LAT, OFFICE_LON, 1)


def test_point_600m_away_is_outside_500m_radius():
    lat = OFFICE_LAT + 600 / METERS_PER_DEGREE
    assert not is_within_geofence(lat, OFFICE_LON, OFFICE_LAT, OFFICE_LON, 500)
    assert is_within_geofence(lat, OFFICE_LON, OFFICE_LAT, OFFICE_LON, 700)


def test_disabled_geofence_never_flags():
    result = evaluate_punch_location(company(enabled=False), None, None)
    assert result.flagged is False

    far = evaluate_punch_location(company(enabled=False), 0.0, 0.0)
    assert far.flagged is False


def test_missing_location_is_flagged_when_enabled():
    result = evaluate_punch_location(company(), None, None)
    assert result.flagged is True
    assert result.reason == "location_unavailable"


def test_outside_radius_is_flagged_with_distance():
    lat = OFFICE_LAT + 600 / METERS_PER_DEGREE
    result = evaluate_punch_location(company(radius=500.0), lat, OFFICE_LON)
    assert result.flagged is True
    assert result.reason == "outside_geofence"
    assert result.distance_meters == pytest.approx(600, abs=1)


def test_inside_radius_is_not_flagged():
    lat = OFFICE_LAT + 100 / METERS_PER_DEGREE
    result = evaluate_punch_location(company(radius=500.0), lat, OFFICE_LON)
    assert result.flagged is False
    assert result.reason is None


def test_enabled_without_center_only_checks_for_missing_location():
    no_center = company(lat=None, lon=None)
    assert evaluate_punch_location(no_center, 0.0, 0.0).flagged is False
    assert evaluate_punch_location(no_center, None, None).flagged is True


def test_no_settings_row_means_not_flagged():
    assert evaluate_punch_location(None, None, None).flagged is False


def test_get_company_settings_creates_defaults_once(db):
    first = get_company_settings(db)
    db.commit()
    second = get_company_settings(db)

    assert first.id == second.id == 1
    assert second.geofencing_enabled is False
    assert second.geo_radius == 500.0
    assert db.query(CompanySettings).count() == 1


def test_point_exactly_on_radius_is_inside():
    lat = OFFICE_LAT + 250 / METERS_PER_DEGREE
    radius = haversine_distance(lat, OFFICE_LON, OFFICE_LAT, OFFICE_LON)
    assert evaluate_punch_location(company(radius=radius), lat, OFFICE_LON).flagged is False
    assert evaluate_punch_location(company(radius=radius - 0.01), lat, OFFICE_LON).flagged is True
