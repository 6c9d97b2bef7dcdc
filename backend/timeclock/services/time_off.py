"""Time-off requests and the admin decision on them.

A decision (approved / denied) is final: status, processed_date and
processed_by are written in one commit and never change afterwards. To change
a decision the request is deleted and filed again.
"""
import logging
import re
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from timeclock.core.clock import Clock
from timeclock.core.database import commit_or_raise
from timeclock.core.exceptions import ConflictError, NotFoundError, ValidationError
from timeclock.models.employee import Employee
from timeclock.models.time_off import TimeOffRequest, TimeOffStatus, TimeOffType

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
TYPES = tuple(t.value for t in TimeOffType)
DECISIONS = (TimeOffStatus.APPROVED.value, TimeOffStatus.DENIED.value)


class TimeOffService:

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock

    def request_time_off(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        type: str,
        is_partial_day: bool = False,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> TimeOffRequest:
        if start_date is None or end_date is None:
            raise ValidationError("Start and end date are required")
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")
        if type not in TYPES:
            raise ValidationError(f"Invalid time-off type: {type!r}")

        if is_partial_day:
            if start_date != end_date:
                raise ValidationError("A partial-day request must start and end on the same date")
            if not start_time or not end_time:
                raise ValidationError("A partial-day request needs a start and end time")
            for value in (start_time, end_time):
                if not TIME_RE.match(value):
                    raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")
            # zero-padded HH:MM compares correctly as text
            if start_time >= end_time:
                raise ValidationError("Start time must be before end time")
        else:
            start_time = end_time = None

        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        request = TimeOffRequest(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            is_partial_day=bool(is_partial_day),
            start_time=start_time,
            end_time=end_time,
            type=type,
            reason=(reason or "").strip() or None,
            request_date=self.clock.now(),
            status=TimeOffStatus.PENDING.value,
        )
        self.db.add(request)
        commit_or_raise(self.db, "create time-off request")
        self.db.refresh(request)
        logger.info(
            f"Time-off request {request.id} ({type}) {start_date}..{end_date} filed by employee_id={employee_id}"
        )
        return request

    def decide(
        self,
        request_id: int,
        status: str,
        processed_by: int,
        admin_response: Optional[str] = None,
    ) -> TimeOffRequest:
        status = str(status or "").lower()
        if status not in DECISIONS:
            raise ValidationError(f"Invalid decision: {status!r} (expected 'approved' or 'denied')")

        request = self.get(request_id)
        if request.status != TimeOffStatus.PENDING.value:
            raise ConflictError(f"Time-off request {request_id} was already {request.status}")

        request.status = status
        request.admin_response = (admin_response or "").strip() or None
        request.processed_date = self.clock.now()
        request.processed_by = processed_by
        commit_or_raise(self.db, "record time-off decision")
        self.db.refresh(request)
        logger.info(f"Time-off request {request_id} {status} by employee_id={processed_by}")
        return request

    def get(self, request_id: int) -> TimeOffRequest:
        request = self.db.query(TimeOffRequest).filter(TimeOffRequest.id == request_id).first()
        if not request:
            raise NotFoundError(f"Time-off request {request_id} not found")
        return request

    def requests_overlapping(
        self,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[TimeOffRequest]:
        """Requests whose [start_date, end_date] intersects the query range (inclusive)."""
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")
        query = self.db.query(TimeOffRequest).filter(
            TimeOffRequest.start_date <= end_date,
            TimeOffRequest.end_date >= start_date,
        )
        if employee_id is not None:
            query = query.filter(TimeOffRequest.employee_id == employee_id)
        if status:
            query = query.filter(TimeOffRequest.status == status)
        return query.order_by(TimeOffRequest.start_date.asc(), TimeOffRequest.id.asc()).all()

    def list_by_employee(self, employee_id: int) -> List[TimeOffRequest]:
        return (
            self.db.query(TimeOffRequest)
            .filter(TimeOffRequest.employee_id == employee_id)
            .order_by(TimeOffRequest.request_date.desc(), TimeOffRequest.id.desc())
            .all()
        )

    def list_all(self, status: Optional[str] = None) -> List[TimeOffRequest]:
        query = self.db.query(TimeOffRequest)
        if status:
            query = query.filter(TimeOffRequest.status == status)
        return query.order_by(TimeOffRequest.request_date.desc(), TimeOffRequest.id.desc()).all()

    def delete_request(self, request_id: int, actor: Employee) -> bool:
        """Admins may delete any request; employees may withdraw their own pending one."""
        request = self.get(request_id)
        if not actor.is_admin:
            if request.employee_id != actor.id:
                raise NotFoundError(f"Time-off request {request_id} not found")
            if request.status != TimeOffStatus.PENDING.value:
                raise ConflictError("Only pending requests can be withdrawn")
        self.db.delete(request)
        commit_or_raise(self.db, "delete time-off request")
        logger.info(f"Time-off request {request_id} deleted by employee_id={actor.id}")
        return True
