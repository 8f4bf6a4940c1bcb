"""Recovery class booking: decide which credit pays for it, and refund on cancel."""

from datetime import datetime
from uuid import UUID

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.clock import Clock
from app.core.config import settings
from app.core.enums import BookingStatus
from app.core.exceptions import (
    CancellationWindowClosed,
    ConcurrentUpdate,
    InsufficientCredits,
    NotFound,
    ServiceError,
)
from app.core.logging import get_logger
from app.core.models import RecoveryClass, StudentAttendanceEntry

from ..credits import repository
from ..credits.calculator import adjustment_net
from ..credits.service import credits_for_account
from .schemas import RecoveryClassCreate, RecoveryClassResponse

logger = get_logger(__name__)


def _to_civil(value: datetime, clock: Clock) -> datetime:
    """Stored class dates are naive civil times in the school timezone."""
    if value.tzinfo is None:
        return value
    return value.astimezone(clock.timezone).replace(tzinfo=None)


async def _commit_account_change(db: AsyncSession) -> None:
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise ConcurrentUpdate()


async def apply_booking(
    db: AsyncSession,
    clock: Clock,
    student_id: UUID,
    payload: RecoveryClassCreate,
) -> RecoveryClassResponse:
    """Create a recovery booking, spending manual adjustment credits first."""
    account = await repository.get_account(db, student_id)
    info = await credits_for_account(db, clock, account)
    if info.is_frozen:
        raise InsufficientCredits("Student account is frozen.")
    if info.total_credits <= 0:
        raise InsufficientCredits()

    if payload.attendance_entry_id:
        entry = await db.get(StudentAttendanceEntry, payload.attendance_entry_id)
        if not entry or entry.student_id != student_id:
            raise ServiceError("Invalid absence for this student.", status.HTTP_400_BAD_REQUEST)

    should_use_adjustment = adjustment_net(account) > 0
    booking = RecoveryClass(
        student_id=student_id,
        karate_class_id=payload.karate_class_id,
        attendance_entry_id=payload.attendance_entry_id,
        class_date=_to_civil(payload.class_date, clock),
        status=BookingStatus.ACTIVE.value,
        used_adjustment=should_use_adjustment,
    )
    db.add(booking)
    if should_use_adjustment:
        account.used_recovery_adjustment_credits = (account.used_recovery_adjustment_credits or 0) + 1
    # Always touch the account so the version check covers absence-paid bookings too
    account.updated_at = datetime.utcnow()
    await _commit_account_change(db)
    await db.refresh(booking)

    logger.info(
        "Recovery class %s booked for student %s (used_adjustment=%s)",
        booking.id, student_id, should_use_adjustment,
    )
    return RecoveryClassResponse.model_validate(booking)


async def cancel_booking(db: AsyncSession, clock: Clock, booking_id: UUID) -> UUID:
    """Soft-delete a booking and give back the credit it consumed."""
    booking = await db.get(RecoveryClass, booking_id)
    if not booking or booking.status != BookingStatus.ACTIVE.value:
        raise NotFound("Recovery class not found")

    hours_limit = settings.recovery_cancel_hours_limit
    hours_until_class = (booking.class_date - clock.local_now()).total_seconds() / 3600
    if hours_until_class < hours_limit:
        raise CancellationWindowClosed(hours_limit)

    account = await repository.get_account(db, booking.student_id)
    booking.status = BookingStatus.DELETED.value
    if booking.used_adjustment:
        account.used_recovery_adjustment_credits = (account.used_recovery_adjustment_credits or 0) - 1
    # An absence-paid booking needs no counter change: once inactive it stops consuming an absence
    account.updated_at = datetime.utcnow()
    await _commit_account_change(db)

    logger.info(
        "Recovery class %s cancelled for student %s (refunded_adjustment=%s)",
        booking_id, booking.student_id, booking.used_adjustment,
    )
    return booking_id
