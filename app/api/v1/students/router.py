from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import PlanChangeRequest, PlanChangeResponse
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.put("/{student_id}/plan", response_model=PlanChangeResponse)
async def change_student_plan(
    student_id: UUID,
    payload: PlanChangeRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PlanChangeResponse:
    """Change a student's enrollment plan; absences over the new cap become overflow."""
    try:
        return await service.change_enrollment_plan(db, clock, student_id, payload.enrollment_plan)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
