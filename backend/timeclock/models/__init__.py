from timeclock.models.employee import Employee
from timeclock.models.punch import Punch, PunchType
from timeclock.models.correction import Correction, CorrectionStatus
from timeclock.models.time_off import TimeOffRequest, TimeOffStatus, TimeOffType
from timeclock.models.company_settings import CompanySettings

__all__ = [
    "Employee",
    "Punch",
    "PunchType",
    "Correction",
    "CorrectionStatus",
    "TimeOffRequest",
    "TimeOffStatus",
    "TimeOffType",
    "CompanySettings",
]
