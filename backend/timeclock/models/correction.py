import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from timeclock.core.database import Base


class CorrectionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class Correction(Base):
    """Employee request to review a punch. An audit trail of intent only:
    approving it does not touch the punch."""
    __tablename__ = "corrections"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)

    # Weak reference (no FK): the punch may be edited or deleted independently
    punch_id = Column(Integer, nullable=True, index=True)

    date = Column(DateTime, nullable=False)  # when the employee asked
    note = Column(Text, nullable=False)

    status = Column(String, default=CorrectionStatus.PENDING.value, nullable=False, index=True)

    # Admin decision
    admin_note = Column(Text, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(Integer, ForeignKey("employees.id"), nullable=True)

    # Relationships
    employee = relationship("Employee", foreign_keys=[employee_id])
    resolved_by_employee = relationship("Employee", foreign_keys=[resolved_by])
