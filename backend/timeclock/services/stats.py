"""Admin dashboard counters. Recomputed on every call, never cached.

"Today" is server-local [midnight, midnight + 24h), not per-employee.
"""
from typing import Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from timeclock.core.clock import Clock
from timeclock.models.correction import Correction, CorrectionStatus
from timeclock.models.employee import Employee
from timeclock.models.punch import Punch, PunchType


class StatsService:

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock

    def get_admin_stats(self) -> Dict[str, int]:
        start, end = self.clock.today_bounds()

        active_employees = (
            self.db.query(func.count(Employee.id)).filter(Employee.is_active == True).scalar()
        )

        today_punches = (
            self.db.query(Punch)
            .filter(Punch.timestamp >= start, Punch.timestamp < end)
            .order_by(Punch.timestamp.desc(), Punch.id.desc())
            .all()
        )

        # Latest punch of today per employee decides whether they're in
        latest_type = {}
        for punch in today_punches:
            latest_type.setdefault(punch.employee_id, punch.punch_type)
        clocked_in_today = sum(1 for t in latest_type.values() if t == PunchType.IN.value)

        pending_corrections = (
            self.db.query(func.count(Correction.id))
            .filter(Correction.status == CorrectionStatus.PENDING.value)
            .scalar()
        )

        return {
            "active_employees": active_employees or 0,
            "clocked_in_today": clocked_in_today,
            "punches_today": len(today_punches),
            "pending_corrections": pending_corrections or 0,
        }
