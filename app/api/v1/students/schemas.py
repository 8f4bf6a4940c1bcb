from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..credits.schemas import AvailableCreditsInfo, ReconcileResult


class PlanChangeRequest(BaseModel):
    enrollment_plan: str = Field(..., description="Basic, Optimum, Plus or Advanced")


class PlanChangeResponse(BaseModel):
    student_id: UUID
    previous_plan: Optional[str] = None
    enrollment_plan: str
    reconciliation: ReconcileResult
    credits: AvailableCreditsInfo
