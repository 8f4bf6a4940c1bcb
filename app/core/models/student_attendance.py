"""Attendance record per (class, date, time slot) with one entry per student."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.core.enums import OverflowReason, RecordStatus
from app.db.session import Base


@dataclass(frozen=True)
class AbsenceTag:
    """Overflow state of an absence: countable, or overflow with a reason."""

    reason: Optional[OverflowReason] = None

    @property
    def is_overflow(self) -> bool:
        return self.reason is not None


COUNTABLE = AbsenceTag()


class StudentAttendance(Base):
    __tablename__ = "student_attendances"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    karate_class_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    # Civil date-time of the class in the school timezone (naive)
    class_date = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    entries = relationship(
        "StudentAttendanceEntry",
        back_populates="attendance",
        cascade="all, delete-orphan",
        order_by="StudentAttendanceEntry.position",
    )


class StudentAttendanceEntry(Base):
    """One student's attendance inside a record."""

    __tablename__ = "student_attendance_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_attendance_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_attendances.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    attendance_status = Column(String(20), nullable=False)  # present, absent, late, sick
    observations = Column(Text, nullable=True)
    # Drop-in / trial attendance never generates or consumes credits
    is_day_only = Column(Boolean, nullable=False, default=False)
    # Student was here on a recovery booking
    is_recovery = Column(Boolean, nullable=False, default=False)
    is_overflow_absence = Column(Boolean, nullable=False, default=False)
    overflow_reason = Column(String(50), nullable=True)

    attendance = relationship("StudentAttendance", back_populates="entries")

    @property
    def tag(self) -> AbsenceTag:
        if not self.is_overflow_absence:
            return COUNTABLE
        try:
            return AbsenceTag(OverflowReason(self.overflow_reason))
        except ValueError:
            # Legacy rows flagged without a known reason
            return AbsenceTag(OverflowReason.UNSPECIFIED)

    def apply_tag(self, tag: AbsenceTag) -> None:
        self.is_overflow_absence = tag.is_overflow
        self.overflow_reason = tag.reason.value if tag.reason else None
