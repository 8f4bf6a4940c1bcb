from typing import Dict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import AvailableCreditsInfo, CreditAdjustmentRequest, CreditsBatchRequest, StudentCreditsResponse
from . import service

router = APIRouter(prefix="/api/v1/credits", tags=["credits"])


@router.get("/{student_id}", response_model=StudentCreditsResponse)
async def get_student_credits(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> StudentCreditsResponse:
    """Current recovery credit balance of a student."""
    try:
        info = await service.get_available_credits(db, clock, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return StudentCreditsResponse(student_id=student_id, **info.model_dump())


@router.post("/batch", response_model=Dict[UUID, AvailableCreditsInfo])
async def get_students_credits(
    payload: CreditsBatchRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> Dict[UUID, AvailableCreditsInfo]:
    """Balances for many students at once. Unknown students are omitted."""
    return await service.get_available_credits_for_many(db, clock, payload.student_ids)


@router.post("/{student_id}/adjust", response_model=StudentCreditsResponse)
async def adjust_student_credits(
    student_id: UUID,
    payload: CreditAdjustmentRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> StudentCreditsResponse:
    """Grant (1) or remove (-1) a manual recovery credit."""
    try:
        info = await service.adjust_recovery_credits(db, clock, student_id, payload.adjustment)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return StudentCreditsResponse(student_id=student_id, **info.model_dump())
