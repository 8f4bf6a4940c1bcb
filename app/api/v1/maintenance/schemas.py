from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..credits.schemas import ReconcileResult


class OverflowClearRequest(BaseModel):
    reason: str = Field(..., description="overflow reason to clear, e.g. plan-cap")
    student_id: Optional[UUID] = None


class RemediationResult(BaseModel):
    """Rows considered and rows changed by a bulk remediation."""

    matched: int
    modified: int


class OverflowReportItem(BaseModel):
    student_id: UUID
    full_name: Optional[str] = None
    reason: str
    count: int


class OverflowReport(BaseModel):
    totals: Dict[str, int]
    total: int
    items: List[OverflowReportItem]


class BatchReconcileRequest(BaseModel):
    student_ids: List[UUID] = Field(..., min_length=1)


class BatchFailure(BaseModel):
    student_id: UUID
    error: str


class BatchReconcileResult(BaseModel):
    reconciled: List[ReconcileResult]
    failed: List[BatchFailure]
