from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import RecoveryClassCreate, RecoveryClassDeleted, RecoveryClassResponse
from . import service

router = APIRouter(prefix="/api/v1/recovery-classes", tags=["recovery-classes"])


@router.post(
    "",
    response_model=RecoveryClassResponse,
    status_code=status.HTTP_201_CREATED,
)
async def book_recovery_class(
    payload: RecoveryClassCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RecoveryClassResponse:
    """Book a recovery class with one of the student's credits."""
    try:
        return await service.apply_booking(db, clock, payload.student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{recovery_class_id}", response_model=RecoveryClassDeleted)
async def cancel_recovery_class(
    recovery_class_id: UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RecoveryClassDeleted:
    """Cancel a booking; allowed until the configured number of hours before class."""
    try:
        deleted_id = await service.cancel_booking(db, clock, recovery_class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return RecoveryClassDeleted(recovery_class_id=deleted_id)
