from typing import List
from uuid import UUID

from pydantic import BaseModel, Field


class Snapshot(BaseModel):
    """Absences and active bookings of one student, reconciled."""

    absences_count: int = 0
    booked_count: int = 0
    adjustment_booked_count: int = 0
    consumed_absences: int = 0
    pending_absences: int = 0


ZERO_SNAPSHOT = Snapshot()


class AvailableCreditsInfo(BaseModel):
    plan: str
    max_pending: int
    credits_from_absences: int
    # Net manual credits still available (granted - used)
    adjustment: int
    adjustment_total: int
    adjustment_used: int
    booked_count: int
    adjustment_booked_count: int
    absences_count: int
    consumed_absences: int
    pending_absences: int
    total_credits: int
    is_frozen: bool


class StudentCreditsResponse(AvailableCreditsInfo):
    student_id: UUID


class CreditsBatchRequest(BaseModel):
    student_ids: List[UUID] = Field(..., min_length=1)


class CreditAdjustmentRequest(BaseModel):
    adjustment: int = Field(..., description="1 to grant a credit, -1 to remove one")


class ReconcileResult(BaseModel):
    """Outcome of one overflow reconciliation pass."""

    student_id: UUID
    plan: str
    plan_max: int
    scanned: int
    countable: int
    tagged: int
    cleared: int
