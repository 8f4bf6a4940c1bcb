"""
Administrative overflow remediation.

Reconciliation after a plan change only ever adds overflow tags. Removing them
is done here, explicitly, and reported as matched/modified row counts.
"""

from typing import Iterable, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.enums import AccountStatus, OverflowReason
from app.core.exceptions import ServiceError
from app.core.logging import get_logger
from app.core.models import StudentAccount, StudentAttendanceEntry

from ..credits import repository
from ..credits.overflow import reconcile_account
from ..credits.policy import DEFAULT_PLAN, parse_plan
from .schemas import (
    BatchFailure,
    BatchReconcileResult,
    OverflowReport,
    OverflowReportItem,
    RemediationResult,
)

logger = get_logger(__name__)

# Reasons actually stored on entries; UNSPECIFIED is only derived when reading
CLEARABLE_REASONS = {OverflowReason.PLAN_CAP.value, OverflowReason.PLAN_DOWNGRADE.value}


async def clear_overflow_by_reason(
    db: AsyncSession,
    reason: str,
    student_id: Optional[UUID] = None,
) -> RemediationResult:
    """Reset entries tagged with `reason` back to countable."""
    if reason not in CLEARABLE_REASONS:
        raise ServiceError(f"Unknown overflow reason: {reason}", status.HTTP_400_BAD_REQUEST)
    criteria = [StudentAttendanceEntry.overflow_reason == reason]
    if student_id is not None:
        criteria.append(StudentAttendanceEntry.student_id == student_id)

    matched = (
        await db.execute(select(func.count(StudentAttendanceEntry.id)).where(*criteria))
    ).scalar_one()
    result = await db.execute(
        update(StudentAttendanceEntry)
        .where(*criteria)
        .values(is_overflow_absence=False, overflow_reason=None)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()

    outcome = RemediationResult(matched=matched, modified=result.rowcount or 0)
    logger.info("Overflow %s cleared: %s", reason, outcome.model_dump())
    return outcome


async def normalize_reasonless_overflow(db: AsyncSession) -> RemediationResult:
    """Overflow flags without a recorded reason predate reason tracking; make them countable."""
    criteria = [
        StudentAttendanceEntry.is_overflow_absence.is_(True),
        StudentAttendanceEntry.overflow_reason.is_(None),
    ]
    matched = (
        await db.execute(select(func.count(StudentAttendanceEntry.id)).where(*criteria))
    ).scalar_one()
    result = await db.execute(
        update(StudentAttendanceEntry)
        .where(*criteria)
        .values(is_overflow_absence=False)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()

    outcome = RemediationResult(matched=matched, modified=result.rowcount or 0)
    logger.info("Overflow without reason normalized: %s", outcome.model_dump())
    return outcome


async def report_overflow_by_reason(
    db: AsyncSession,
    exclude_reason: Optional[str] = OverflowReason.PLAN_DOWNGRADE.value,
) -> OverflowReport:
    """Overflow entries per student and reason, most frequent first."""
    q = (
        select(
            StudentAttendanceEntry.student_id,
            StudentAccount.full_name,
            StudentAttendanceEntry.overflow_reason,
            func.count(StudentAttendanceEntry.id).label("count"),
        )
        .join(StudentAccount, StudentAttendanceEntry.student_id == StudentAccount.id)
        .where(
            StudentAttendanceEntry.is_overflow_absence.is_(True),
            StudentAttendanceEntry.overflow_reason.is_not(None),
        )
        .group_by(
            StudentAttendanceEntry.student_id,
            StudentAccount.full_name,
            StudentAttendanceEntry.overflow_reason,
        )
        .order_by(func.count(StudentAttendanceEntry.id).desc())
    )
    if exclude_reason:
        q = q.where(StudentAttendanceEntry.overflow_reason != exclude_reason)
    rows = (await db.execute(q)).all()

    items = [
        OverflowReportItem(student_id=student_id, full_name=full_name, reason=reason, count=count)
        for student_id, full_name, reason, count in rows
    ]
    totals: dict = {}
    for item in items:
        totals[item.reason] = totals.get(item.reason, 0) + item.count
    return OverflowReport(totals=totals, total=sum(totals.values()), items=items)


async def list_active_student_ids(db: AsyncSession) -> list:
    result = await db.execute(
        select(StudentAccount.id).where(StudentAccount.status == AccountStatus.ACTIVE.value)
    )
    return list(result.scalars().all())


async def reconcile_many(
    db: AsyncSession,
    clock: Clock,
    student_ids: Iterable[UUID],
) -> BatchReconcileResult:
    """Reconcile each student against their current plan, committing per student.

    A failing student is reported and skipped; the others still run.
    After a failure the session is rolled back, which expires instances the caller loaded.
    """
    reconciled = []
    failed = []
    for student_id in dict.fromkeys(student_ids):
        try:
            account = await repository.get_account(db, student_id, for_update=True)
            plan = parse_plan(account.enrollment_plan or DEFAULT_PLAN)
            outcome = await reconcile_account(db, clock, account, plan)
            await db.commit()
            reconciled.append(outcome)
        except ServiceError as e:
            await db.rollback()
            logger.warning("Overflow reconciliation failed for student %s: %s", student_id, e.message)
            failed.append(BatchFailure(student_id=student_id, error=e.message))
        except SQLAlchemyError as e:
            await db.rollback()
            logger.warning("Overflow reconciliation failed for student %s: %s", student_id, e)
            failed.append(BatchFailure(student_id=student_id, error=str(e)))
    return BatchReconcileResult(reconciled=reconciled, failed=failed)
