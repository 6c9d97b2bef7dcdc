import threading
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from timeclock.core.clock import FrozenClock
from timeclock.core.database import Base
from timeclock.core.exceptions import DuplicatePunchError, NotFoundError, StorageError, ValidationError
from timeclock.models import CompanySettings, Employee, Punch
from timeclock.services.punch_ledger import KeyedLocks, PunchLedgerService

from conftest import NOW, OFFICE_LAT, OFFICE_LON, make_employee

IP = "10.0.0.5"


@pytest.fixture
def ledger(db, clock):
    return PunchLedgerService(db, clock)


def test_punch_is_stamped_with_server_time(ledger, employee):
    punch = ledger.create_punch(employee.id, "in", IP)
    assert punch.timestamp == NOW
    assert punch.punch_type == "in"
    assert punch.is_manual is False
    assert punch.ip_address == IP


def test_same_type_inside_window_is_rejected(ledger, clock, employee):
    ledger.create_punch(employee.id, "in", IP)
    clock.advance(seconds=29)
    with pytest.raises(DuplicatePunchError):
        ledger.create_punch(employee.id, "in", IP)
    assert len(ledger.list_by_employee(employee.id)) == 1


def test_punch_exactly_on_window_edge_is_allowed(ledger, clock, employee):
    ledger.create_punch(employee.id, "out", IP)
    clock.advance(seconds=30)
    ledger.create_punch(employee.id, "out", IP)
    assert len(ledger.list_by_employee(employee.id)) == 2


def test_out_then_out_45s_later_both_recorded(ledger, clock, employee):
    ledger.create_punch(employee.id, "out", IP)
    clock.advance(seconds=45)
    ledger.create_punch(employee.id, "out", IP)
    assert [p.punch_type for p in ledger.list_by_employee(employee.id)] == ["out", "out"]


def test_different_types_are_not_deduplicated(ledger, employee):
    ledger.create_punch(employee.id, "in", IP)
    ledger.create_punch(employee.id, "out", IP)
    assert len(ledger.list_by_employee(employee.id)) == 2


def test_window_is_per_employee(ledger, employee, other_employee):
    ledger.create_punch(employee.id, "in", IP)
    ledger.create_punch(other_employee.id, "in", IP)
    assert len(ledger.list_all()) == 2


def test_custom_dedup_window(db, clock, employee):
    ledger = PunchLedgerService(db, clock, dedup_seconds=5)
    ledger.create_punch(employee.id, "in", IP)
    clock.advance(seconds=5)
    ledger.create_punch(employee.id, "in", IP)
    assert len(ledger.list_by_employee(employee.id)) == 2


def test_manual_punches_skip_dedup(ledger, employee):
    at = NOW - timedelta(hours=3)
    first = ledger.create_manual_punch(employee.id, "in", at, IP)
    second = ledger.create_manual_punch(employee.id, "in", at + timedelta(seconds=5), IP)
    assert first.is_manual and second.is_manual
    assert first.timestamp == at
    assert len(ledger.list_by_employee(employee.id)) == 2


def test_manual_punch_requires_timestamp(ledger, employee):
    with pytest.raises(ValidationError):
        ledger.create_manual_punch(employee.id, "in", None, IP)


def test_invalid_punch_type(ledger, employee):
    with pytest.raises(ValidationError):
        ledger.create_punch(employee.id, "lunch", IP)


def test_unknown_or_inactive_employee_cannot_punch(db, ledger):
    inactive = make_employee(db, "Former Staff", "3001", is_active=False)
    with pytest.raises(NotFoundError):
        ledger.create_punch(inactive.id, "in", IP)
    with pytest.raises(NotFoundError):
        ledger.create_punch(9999, "in", IP)


def test_no_flag_when_geofencing_disabled(ledger, employee):
    punch = ledger.create_punch(employee.id, "in", IP)
    assert punch.flagged is False


def test_flagged_without_location_when_geofencing_enabled(ledger, employee, geofence):
    punch = ledger.create_punch(employee.id, "in", IP)
    assert punch.flagged is True


def test_flagged_outside_radius(ledger, employee, geofence):
    punch = ledger.create_punch(employee.id, "in", IP, latitude=OFFICE_LAT + 0.01, longitude=OFFICE_LON)
    assert punch.flagged is True
    assert punch.latitude == pytest.approx(OFFICE_LAT + 0.01)


def test_not_flagged_inside_radius(ledger, employee, geofence):
    punch = ledger.create_punch(employee.id, "in", IP, latitude=OFFICE_LAT, longitude=OFFICE_LON)
    assert punch.flagged is False


def test_client_hint_flags_punch(ledger, employee):
    punch = ledger.create_punch(employee.id, "in", IP, flagged_hint=True)
    assert punch.flagged is True


def test_update_changes_only_given_fields(ledger, employee):
    punch = ledger.create_punch(employee.id, "in", IP, latitude=1.5, longitude=2.5)
    new_time = NOW - timedelta(minutes=20)

    updated = ledger.update_punch(punch.id, timestamp=new_time)

    assert updated.timestamp == new_time
    assert updated.punch_type == "in"
    assert updated.flagged is False
    assert updated.latitude == 1.5
    assert updated.longitude == 2.5
    assert updated.ip_address == IP
    assert updated.employee_id == employee.id


def test_update_type_and_flag(ledger, employee):
    punch = ledger.create_punch(employee.id, "in", IP)
    updated = ledger.update_punch(punch.id, punch_type="out", flagged=True)
    assert updated.punch_type == "out"
    assert updated.flagged is True
    assert updated.timestamp == NOW


def test_update_rejects_non_editable_fields(ledger, employee):
    punch = ledger.create_punch(employee.id, "in", IP)
    with pytest.raises(ValidationError):
        ledger.update_punch(punch.id, employee_id=42)


def test_update_missing_punch(ledger):
    with pytest.raises(NotFoundError):
        ledger.update_punch(1234, flagged=True)


def test_future_timestamps_rejected_for_admin_entries(ledger, employee):
    with pytest.raises(ValidationError):
        ledger.create_manual_punch(employee.id, "out", NOW + timedelta(hours=6), IP)

    punch = ledger.create_punch(employee.id, "in", IP)
    with pytest.raises(ValidationError):
        ledger.update_punch(punch.id, timestamp=NOW + timedelta(minutes=1))
    assert ledger.get_punch(punch.id).timestamp == NOW


def test_future_dated_row_does_not_block_self_punch(db, ledger, employee):
    db.add(Punch(employee_id=employee.id, punch_type="out", timestamp=NOW + timedelta(hours=6), ip_address=IP))
    db.commit()

    punch = ledger.create_punch(employee.id, "out", IP)
    assert punch.timestamp == NOW


def test_offset_aware_timestamps_stored_as_local_naive(ledger, employee):
    aware = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)
    expected = aware.astimezone().replace(tzinfo=None)

    punch = ledger.create_manual_punch(employee.id, "in", aware, IP)
    assert punch.timestamp == expected
    assert punch.timestamp.tzinfo is None

    later = datetime(2025, 3, 10, 9, 30, tzinfo=timezone(timedelta(hours=-5)))
    updated = ledger.update_punch(punch.id, timestamp=later)
    assert updated.timestamp == later.astimezone().replace(tzinfo=None)


def test_punch_does_not_create_settings_row(db, ledger, employee):
    ledger.create_punch(employee.id, "in", IP)
    assert db.query(CompanySettings).count() == 0


def test_commit_failure_raises_storage_error_and_keeps_nothing(db, ledger, employee, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT INTO punches", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(StorageError):
        ledger.create_punch(employee.id, "in", IP)
    assert db.query(Punch).count() == 0


def test_delete_punch(ledger, employee):
    punch = ledger.create_punch(employee.id, "in", IP)
    assert ledger.delete_punch(punch.id) is True
    with pytest.raises(NotFoundError):
        ledger.get_punch(punch.id)
    with pytest.raises(NotFoundError):
        ledger.delete_punch(punch.id)


def test_list_is_newest_first_with_inclusive_range(ledger, employee):
    times = [NOW - timedelta(hours=h) for h in (5, 3, 1)]
    for t in times:
        ledger.create_manual_punch(employee.id, "in", t, IP)

    all_punches = ledger.list_by_employee(employee.id)
    assert [p.timestamp for p in all_punches] == sorted(times, reverse=True)

    ranged = ledger.list_by_employee(employee.id, start=times[0], end=times[1])
    assert [p.timestamp for p in ranged] == [times[1], times[0]]

    with pytest.raises(ValidationError):
        ledger.list_all(start=NOW, end=NOW - timedelta(days=1))


def test_last_punch_and_clocked_in_status(ledger, clock, employee):
    assert ledger.last_punch_for(employee.id) is None
    assert ledger.is_clocked_in(employee.id) is False

    ledger.create_punch(employee.id, "in", IP)
    assert ledger.is_clocked_in(employee.id) is True

    clock.advance(hours=1)
    out = ledger.create_punch(employee.id, "out", IP)
    assert ledger.last_punch_for(employee.id).id == out.id
    assert ledger.is_clocked_in(employee.id) is False


def test_keyed_locks_share_lock_per_key():
    locks = KeyedLocks()
    assert locks.get((1, "in")) is locks.get((1, "in"))
    assert locks.get((1, "in")) is not locks.get((1, "out"))


def test_concurrent_double_tap_records_one_punch(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    setup.add(CompanySettings(id=1, company_name="Test Co", geofencing_enabled=False, geo_radius=500.0))
    employee = Employee(name="Sarah Johnson", pin="2001")
    setup.add(employee)
    setup.commit()
    employee_id = employee.id
    setup.close()

    clock = FrozenClock(datetime(2025, 3, 12, 9, 0, 0))
    barrier = threading.Barrier(2)
    outcomes = []

    def tap():
        session = Session()
        try:
            barrier.wait()
            PunchLedgerService(session, clock).create_punch(employee_id, "in", IP)
            outcomes.append("ok")
        except DuplicatePunchError:
            outcomes.append("duplicate")
        finally:
            session.close()

    threads = [threading.Thread(target=tap) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    check = Session()
    assert sorted(outcomes) == ["duplicate", "ok"]
    assert check.query(Punch).count() == 1
    check.close()
    engine.dispose()
