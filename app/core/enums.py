from enum import Enum


class EnrollmentPlan(str, Enum):
    BASIC = "Basic"
    OPTIMUM = "Optimum"
    PLUS = "Plus"
    ADVANCED = "Advanced"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


class RecordStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    SICK = "sick"


class BookingStatus(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class OverflowReason(str, Enum):
    PLAN_CAP = "plan-cap"
    PLAN_DOWNGRADE = "plan-downgrade"
    # Read-only marker for legacy rows flagged without a reason
    UNSPECIFIED = "unspecified"


# Statuses that make an entry an absence candidate
ABSENCE_STATUSES = (AttendanceStatus.ABSENT.value, AttendanceStatus.SICK.value)
