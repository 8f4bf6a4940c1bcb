"""Read entry points for recovery credits and manual credit adjustments."""

from typing import Dict, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.clock import Clock
from app.core.exceptions import ConcurrentUpdate, InsufficientCredits, InvalidAdjustment
from app.core.logging import get_logger
from app.core.models import StudentAccount

from . import repository
from .calculator import adjustment_net, compute_available_credits, needs_snapshot
from .schemas import AvailableCreditsInfo
from .snapshot import get_snapshot, get_snapshots_for_many

logger = get_logger(__name__)


async def credits_for_account(db: AsyncSession, clock: Clock, account: StudentAccount) -> AvailableCreditsInfo:
    snapshot = await get_snapshot(db, clock, account.id) if needs_snapshot(account) else None
    return compute_available_credits(account, snapshot)


async def get_available_credits(db: AsyncSession, clock: Clock, student_id: UUID) -> AvailableCreditsInfo:
    account = await repository.get_account(db, student_id)
    return await credits_for_account(db, clock, account)


async def get_available_credits_for_many(
    db: AsyncSession,
    clock: Clock,
    student_ids: Iterable[UUID],
) -> Dict[UUID, AvailableCreditsInfo]:
    """Credits for many students with one batched scan. Unknown ids are left out."""
    ids = list(dict.fromkeys(student_ids))
    accounts = await repository.get_accounts(db, ids)
    missing = [student_id for student_id in ids if student_id not in accounts]
    if missing:
        logger.warning("Credits requested for %d unknown student(s): %s", len(missing), missing)

    scan_ids = [student_id for student_id, account in accounts.items() if needs_snapshot(account)]
    snapshots = await get_snapshots_for_many(db, clock, scan_ids)
    return {
        student_id: compute_available_credits(accounts[student_id], snapshots.get(student_id))
        for student_id in ids
        if student_id in accounts
    }


async def adjust_recovery_credits(
    db: AsyncSession,
    clock: Clock,
    student_id: UUID,
    adjustment: int,
) -> AvailableCreditsInfo:
    """Grant (+1) or remove (-1) one manual recovery credit."""
    if adjustment not in (1, -1):
        raise InvalidAdjustment()
    account = await repository.get_account(db, student_id)
    if adjustment == -1 and adjustment_net(account) <= 0:
        raise InsufficientCredits("Student has no manual recovery credits to remove.")

    account.recovery_credits_adjustment = (account.recovery_credits_adjustment or 0) + adjustment
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise ConcurrentUpdate()

    logger.info(
        "Recovery credits for student %s adjusted by %d. New adjustment value: %d",
        account.id, adjustment, account.recovery_credits_adjustment,
    )
    return await credits_for_account(db, clock, account)
