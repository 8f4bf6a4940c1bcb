from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RecoveryClassCreate(BaseModel):
    """Book a recovery class. The credit source is decided by the backend."""

    student_id: UUID
    karate_class_id: UUID
    class_date: datetime = Field(..., description="Civil date-time of the class in the school timezone")
    attendance_entry_id: Optional[UUID] = Field(None, description="Absence being recovered, if known")


class RecoveryClassResponse(BaseModel):
    id: UUID
    student_id: UUID
    karate_class_id: UUID
    attendance_entry_id: Optional[UUID] = None
    class_date: datetime
    status: str
    used_adjustment: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RecoveryClassDeleted(BaseModel):
    recovery_class_id: UUID
