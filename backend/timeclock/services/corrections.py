"""Punch correction requests.

pending -> approved   (terminal)
pending -> denied     (terminal, admin note required)
denied  -> denied     re-denial, replaces the admin note

Approving a correction records the decision only. Fixing the punch itself is
a separate admin edit on the ledger.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from timeclock.core.clock import Clock
from timeclock.core.database import commit_or_raise
from timeclock.core.exceptions import ConflictError, NotFoundError, ValidationError
from timeclock.models.correction import Correction, CorrectionStatus
from timeclock.models.employee import Employee
from timeclock.models.punch import Punch

logger = logging.getLogger(__name__)

DECISIONS = (CorrectionStatus.APPROVED.value, CorrectionStatus.DENIED.value)


class CorrectionService:

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock

    def request_correction(self, employee_id: int, punch_id: Optional[int], note: str) -> Correction:
        note = (note or "").strip()
        if not note:
            raise ValidationError("A note describing the correction is required")

        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        if punch_id is not None:
            punch = self.db.query(Punch).filter(
                Punch.id == punch_id,
                Punch.employee_id == employee_id,
            ).first()
            if not punch:
                raise NotFoundError(f"Punch {punch_id} not found")

        correction = Correction(
            employee_id=employee_id,
            punch_id=punch_id,
            date=self.clock.now(),
            note=note,
            status=CorrectionStatus.PENDING.value,
        )
        self.db.add(correction)
        commit_or_raise(self.db, "create correction")
        self.db.refresh(correction)
        logger.info(f"Correction {correction.id} requested by employee_id={employee_id} for punch {punch_id}")
        return correction

    def decide(
        self,
        correction_id: int,
        status: str,
        admin_note: Optional[str] = None,
        decided_by: Optional[int] = None,
    ) -> Correction:
        status = str(status or "").lower()
        if status not in DECISIONS:
            raise ValidationError(f"Invalid decision: {status!r} (expected 'approved' or 'denied')")

        correction = self.get(correction_id)
        note = (admin_note or "").strip() or None

        if status == CorrectionStatus.DENIED.value and not note:
            raise ConflictError("A reason is required to deny a correction")

        current = correction.status
        if current == CorrectionStatus.APPROVED.value:
            raise ConflictError(f"Correction {correction_id} is already approved")
        if current == CorrectionStatus.DENIED.value and status != CorrectionStatus.DENIED.value:
            raise ConflictError(f"Correction {correction_id} is already denied")

        correction.status = status
        correction.admin_note = note
        correction.resolved_at = self.clock.now()
        correction.resolved_by = decided_by
        commit_or_raise(self.db, "record correction decision")
        self.db.refresh(correction)
        logger.info(f"Correction {correction_id}: {current} -> {status} (by employee_id={decided_by})")
        return correction

    def get(self, correction_id: int) -> Correction:
        correction = self.db.query(Correction).filter(Correction.id == correction_id).first()
        if not correction:
            raise NotFoundError(f"Correction {correction_id} not found")
        return correction

    def list_by_employee(self, employee_id: int) -> List[Correction]:
        return (
            self.db.query(Correction)
            .filter(Correction.employee_id == employee_id)
            .order_by(Correction.date.desc(), Correction.id.desc())
            .all()
        )

    def list_all(self, status: Optional[str] = None) -> List[Correction]:
        query = self.db.query(Correction)
        if status:
            query = query.filter(Correction.status == status)
        return query.order_by(Correction.date.desc(), Correction.id.desc()).all()

    def referenced_punch(self, correction: Correction) -> Optional[Punch]:
        """Current state of the punch the correction points at, if it still exists."""
        if correction.punch_id is None:
            return None
        return self.db.query(Punch).filter(Punch.id == correction.punch_id).first()
