from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from timeclock.core.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)

    # Kiosk login credential. Unique among active employees only
    # (checked by EmployeeDirectory), so a retired PIN can be handed out again.
    pin = Column(String(6), nullable=False, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Profile
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    birthday = Column(String, nullable=True)  # "YYYY-MM-DD", display only
    photo_url = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    # Relationships
    punches = relationship("Punch", back_populates="employee")
