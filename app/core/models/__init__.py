from app.core.models.student_account import StudentAccount
from app.core.models.student_attendance import (
    COUNTABLE,
    AbsenceTag,
    StudentAttendance,
    StudentAttendanceEntry,
)
from app.core.models.recovery_class import RecoveryClass

__all__ = [
    "AbsenceTag",
    "COUNTABLE",
    "RecoveryClass",
    "StudentAccount",
    "StudentAttendance",
    "StudentAttendanceEntry",
]
