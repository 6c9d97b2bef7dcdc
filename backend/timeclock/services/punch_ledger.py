"""Punch ledger: recording, dedup and admin edits of clock-in/out events.

Rules:
- Self-service punches are stamped with the server clock, never a client time.
- A self-service punch is rejected if the same employee made a punch of the
  same type less than PUNCH_DEDUP_SECONDS ago (kiosk double-tap guard). A punch
  exactly on the window edge is allowed.
- Admin manual punches carry their own timestamp and skip the dedup window.
  Admin-entered times are stored naive server-local and never in the future.
- Location problems flag a punch for review; they never block it.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from timeclock.core.clock import Clock, to_local_naive
from timeclock.core.config import settings
from timeclock.core.database import commit_or_raise
from timeclock.core.exceptions import DuplicatePunchError, NotFoundError, ValidationError
from timeclock.models.employee import Employee
from timeclock.models.punch import Punch, PunchType
from timeclock.services.geofence import evaluate_punch_location, find_company_settings

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("timestamp", "punch_type", "flagged")


class KeyedLocks:
    """One lock per key, created on demand."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple, threading.Lock] = {}

    def get(self, key: Tuple) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock


# Serializes dedup check + insert + commit per (employee_id, punch_type)
# within this process.
_punch_locks = KeyedLocks()


def validate_punch_type(punch_type: str) -> str:
    value = punch_type.value if isinstance(punch_type, PunchType) else str(punch_type or "").lower()
    if value not in (PunchType.IN.value, PunchType.OUT.value):
        raise ValidationError(f"Invalid punch type: {punch_type!r} (expected 'in' or 'out')")
    return value


class PunchLedgerService:

    def __init__(self, db: Session, clock: Clock, dedup_seconds: Optional[int] = None):
        self.db = db
        self.clock = clock
        self.dedup_window = timedelta(
            seconds=settings.PUNCH_DEDUP_SECONDS if dedup_seconds is None else dedup_seconds
        )

    # ── Writes ───────────────────────────────────────────────────────

    def create_punch(
        self,
        employee_id: int,
        punch_type: str,
        ip_address: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        flagged_hint: bool = False,
    ) -> Punch:
        """Record a self-service punch at the current server time."""
        punch_type = validate_punch_type(punch_type)
        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee or not employee.is_active:
            raise NotFoundError(f"Employee {employee_id} not found")

        geo = evaluate_punch_location(find_company_settings(self.db), latitude, longitude)
        flagged = geo.flagged or bool(flagged_hint)

        with _punch_locks.get((employee_id, punch_type)):
            now = self.clock.now()
            recent = (
                self.db.query(Punch.id)
                .filter(
                    Punch.employee_id == employee_id,
                    Punch.punch_type == punch_type,
                    Punch.timestamp > now - self.dedup_window,
                    Punch.timestamp <= now,
                )
                .first()
            )
            if recent:
                logger.warning(
                    f"Duplicate {punch_type} punch rejected for employee_id={employee_id} "
                    f"(previous punch {recent.id} inside {int(self.dedup_window.total_seconds())}s)"
                )
                raise DuplicatePunchError()

            punch = Punch(
                employee_id=employee_id,
                punch_type=punch_type,
                timestamp=now,
                latitude=latitude,
                longitude=longitude,
                ip_address=ip_address,
                flagged=flagged,
                is_manual=False,
            )
            self.db.add(punch)
            commit_or_raise(self.db, "record punch")

        self.db.refresh(punch)
        if flagged:
            logger.info(
                f"Punch {punch.id} flagged for employee_id={employee_id}: "
                f"{geo.reason or 'client hint'}"
                + (f" ({int(geo.distance_meters)}m from center)" if geo.distance_meters is not None else "")
            )
        return punch

    def create_manual_punch(
        self,
        employee_id: int,
        punch_type: str,
        timestamp: datetime,
        ip_address: str,
        flagged: bool = False,
    ) -> Punch:
        """Admin backfill of a forgotten punch. No dedup window."""
        punch_type = validate_punch_type(punch_type)
        if timestamp is None:
            raise ValidationError("Timestamp is required for a manual punch")
        timestamp = self._checked_timestamp(timestamp)
        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        punch = Punch(
            employee_id=employee_id,
            punch_type=punch_type,
            timestamp=timestamp,
            latitude=None,
            longitude=None,
            ip_address=ip_address,
            flagged=flagged,
            is_manual=True,
        )
        self.db.add(punch)
        commit_or_raise(self.db, "record manual punch")
        self.db.refresh(punch)
        logger.info(f"Manual {punch_type} punch {punch.id} entered for employee_id={employee_id} at {timestamp}")
        return punch

    def update_punch(self, punch_id: int, **fields) -> Punch:
        """Admin edit of timestamp / punch_type / flagged. Other fields stay put."""
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit punch field(s): {', '.join(sorted(unknown))}")

        punch = self.get_punch(punch_id)

        if fields.get("timestamp") is not None:
            punch.timestamp = self._checked_timestamp(fields["timestamp"])
        if fields.get("punch_type") is not None:
            punch.punch_type = validate_punch_type(fields["punch_type"])
        if fields.get("flagged") is not None:
            punch.flagged = bool(fields["flagged"])

        commit_or_raise(self.db, "update punch")
        self.db.refresh(punch)
        logger.info(f"Punch {punch_id} updated: {sorted(k for k, v in fields.items() if v is not None)}")
        return punch

    def delete_punch(self, punch_id: int) -> bool:
        """Hard delete. No tombstone is kept."""
        punch = self.get_punch(punch_id)
        self.db.delete(punch)
        commit_or_raise(self.db, "delete punch")
        logger.info(f"Punch {punch_id} deleted (employee_id={punch.employee_id})")
        return True

    # ── Reads ────────────────────────────────────────────────────────

    def get_punch(self, punch_id: int) -> Punch:
        punch = self.db.query(Punch).filter(Punch.id == punch_id).first()
        if not punch:
            raise NotFoundError(f"Punch {punch_id} not found")
        return punch

    def list_by_employee(
        self,
        employee_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Punch]:
        query = self.db.query(Punch).filter(Punch.employee_id == employee_id)
        return self._in_range(query, start, end).order_by(Punch.timestamp.desc(), Punch.id.desc()).all()

    def list_all(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Punch]:
        query = self.db.query(Punch)
        return self._in_range(query, start, end).order_by(Punch.timestamp.desc(), Punch.id.desc()).all()

    def last_punch_for(self, employee_id: int) -> Optional[Punch]:
        return (
            self.db.query(Punch)
            .filter(Punch.employee_id == employee_id)
            .order_by(Punch.timestamp.desc(), Punch.id.desc())
            .first()
        )

    def is_clocked_in(self, employee_id: int) -> bool:
        last = self.last_punch_for(employee_id)
        return last is not None and last.punch_type == PunchType.IN.value

    def _checked_timestamp(self, timestamp: datetime) -> datetime:
        """Admin-entered times are stored as naive server-local and may not be in the future."""
        timestamp = to_local_naive(timestamp)
        if timestamp > self.clock.now():
            raise ValidationError("Punch timestamp cannot be in the future")
        return timestamp

    @staticmethod
    def _in_range(query, start: Optional[datetime], end: Optional[datetime]):
        if start is not None and end is not None and start > end:
            raise ValidationError("Start of range must not be after its end")
        if start is not None:
            query = query.filter(Punch.timestamp >= start)
        if end is not None:
            query = query.filter(Punch.timestamp <= end)
        return query
