import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Uuid

from app.core.enums import AccountStatus
from app.db.session import Base


class StudentAccount(Base):
    """Credit-relevant subset of a student's profile."""

    __tablename__ = "student_accounts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False, default="")
    # Basic, Optimum, Plus, Advanced; null means the account is frozen
    enrollment_plan = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False, default=AccountStatus.ACTIVE.value)
    is_trial = Column(Boolean, nullable=False, default=False)
    # Lifetime manual credits granted / consumed by bookings
    recovery_credits_adjustment = Column(Integer, nullable=False, default=0)
    used_recovery_adjustment_credits = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Optimistic concurrency: every UPDATE checks and bumps version
    __mapper_args__ = {"version_id_col": version}
