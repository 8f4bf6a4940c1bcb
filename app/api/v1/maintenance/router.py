from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.enums import OverflowReason
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    BatchReconcileRequest,
    BatchReconcileResult,
    OverflowClearRequest,
    OverflowReport,
    RemediationResult,
)
from . import service

router = APIRouter(prefix="/api/v1/maintenance", tags=["maintenance"])


@router.post("/overflow/clear", response_model=RemediationResult)
async def clear_overflow(
    payload: OverflowClearRequest,
    db: AsyncSession = Depends(get_db),
) -> RemediationResult:
    """Remove overflow tags with the given reason (optionally for one student)."""
    try:
        return await service.clear_overflow_by_reason(db, payload.reason, payload.student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/overflow/normalize", response_model=RemediationResult)
async def normalize_overflow(db: AsyncSession = Depends(get_db)) -> RemediationResult:
    """Reset overflow flags that carry no reason."""
    return await service.normalize_reasonless_overflow(db)


@router.get("/overflow/report", response_model=OverflowReport)
async def overflow_report(
    exclude_reason: Optional[str] = OverflowReason.PLAN_DOWNGRADE.value,
    db: AsyncSession = Depends(get_db),
) -> OverflowReport:
    """Overflow entries grouped by student and reason."""
    return await service.report_overflow_by_reason(db, exclude_reason=exclude_reason or None)


@router.post("/overflow/reconcile", response_model=BatchReconcileResult)
async def reconcile_overflow(
    payload: BatchReconcileRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BatchReconcileResult:
    """Re-run overflow reconciliation against each student's current plan."""
    return await service.reconcile_many(db, clock, payload.student_ids)
