import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.core.enums import BookingStatus
from app.db.session import Base


class RecoveryClass(Base):
    """Booking of a makeup class; consumes one recovery credit while active."""

    __tablename__ = "recovery_classes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    karate_class_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    # Absence being recovered, when the caller named one
    attendance_entry_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("student_attendance_entries.id", ondelete="SET NULL"),
        nullable=True,
    )
    class_date = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.ACTIVE.value, index=True)
    # Fixed at creation: true if a manual adjustment credit paid for this booking
    used_adjustment = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("StudentAccount", foreign_keys=[student_id])
