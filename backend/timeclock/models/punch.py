"""Punch ledger model: one row per clock-in / clock-out event.

Rows are append-only for employees. Admins may edit timestamp, type and the
flag, or hard-delete a row. Alternation of in/out is NOT enforced here; the
time reconstruction engine copes with unpaired punches.
"""
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Float, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from timeclock.core.database import Base


class PunchType(str, enum.Enum):
    IN = "in"
    OUT = "out"


class Punch(Base):
    __tablename__ = "punches"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)

    punch_type = Column(String(3), nullable=False)  # "in" / "out"
    timestamp = Column(DateTime, nullable=False, index=True)  # server local time

    # GPS location (absent when the device refused or timed out)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    ip_address = Column(String, nullable=False)

    # Marked for admin review (outside geofence / no location). Never rejects.
    flagged = Column(Boolean, default=False, nullable=False)

    # Admin backfill, entered with an explicit timestamp
    is_manual = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    employee = relationship("Employee", back_populates="punches")

    __table_args__ = (
        Index("ix_punches_employee_type_timestamp", "employee_id", "punch_type", "timestamp"),
    )
