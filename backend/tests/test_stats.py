from datetime import datetime, timedelta

from timeclock.models import Punch
from timeclock.services.corrections import CorrectionService
from timeclock.services.punch_ledger import PunchLedgerService
from timeclock.services.stats import StatsService

from conftest import make_employee

IP = "10.0.0.5"


def test_empty_database(db, clock):
    assert StatsService(db, clock).get_admin_stats() == {
        "active_employees": 0,
        "clocked_in_today": 0,
        "punches_today": 0,
        "pending_corrections": 0,
    }


def test_dashboard_counters(db, clock, employee, other_employee, admin):
    former = make_employee(db, "Former Staff", "3001", is_active=False)
    ledger = PunchLedgerService(db, clock)
    today = clock.now().replace(hour=0, minute=0, second=0)

    # still in
    ledger.create_manual_punch(employee.id, "in", today.replace(hour=8), IP)
    # in and back out
    ledger.create_manual_punch(other_employee.id, "in", today.replace(hour=8), IP)
    ledger.create_manual_punch(other_employee.id, "out", today.replace(hour=10), IP)
    # yesterday only
    ledger.create_manual_punch(former.id, "in", today - timedelta(hours=2), IP)
    # next midnight is not today
    db.add(Punch(employee_id=admin.id, punch_type="in", timestamp=today + timedelta(days=1), ip_address=IP))
    db.commit()

    corrections = CorrectionService(db, clock)
    pending = corrections.request_correction(employee.id, None, "Missed punch")
    decided = corrections.request_correction(other_employee.id, None, "Wrong time")
    corrections.decide(decided.id, "approved", decided_by=admin.id)

    stats = StatsService(db, clock).get_admin_stats()

    assert stats["active_employees"] == 3
    assert stats["clocked_in_today"] == 1
    assert stats["punches_today"] == 3
    assert stats["pending_corrections"] == 1
    assert pending.status == "pending"


def test_punch_at_midnight_counts_as_today(db, clock, employee):
    midnight = datetime.combine(clock.today(), datetime.min.time())
    PunchLedgerService(db, clock).create_manual_punch(employee.id, "in", midnight, IP)
    assert StatsService(db, clock).get_admin_stats()["punches_today"] == 1
