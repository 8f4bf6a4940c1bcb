"""Overflow tagging of absences that exceed a plan's pending cap."""

from typing import List, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.enums import EnrollmentPlan, OverflowReason
from app.core.logging import get_logger
from app.core.models import COUNTABLE, AbsenceTag, StudentAccount

from . import repository
from .calculator import needs_snapshot
from .policy import get_max_pending_for_plan, parse_plan, should_overflow_new_absence
from .repository import TagUpdate
from .snapshot import get_snapshot
from .schemas import ReconcileResult

logger = get_logger(__name__)


async def classify_new_absence(db: AsyncSession, clock: Clock, student_id: UUID) -> AbsenceTag:
    """Tag for an absence about to be recorded: overflow (plan-cap) once the pool is full."""
    account = await repository.get_account(db, student_id)
    if not needs_snapshot(account):
        return COUNTABLE
    snapshot = await get_snapshot(db, clock, student_id)
    plan_max = get_max_pending_for_plan(account.enrollment_plan)
    if should_overflow_new_absence(snapshot.pending_absences, plan_max):
        return AbsenceTag(OverflowReason.PLAN_CAP)
    return COUNTABLE


async def reconcile_account(
    db: AsyncSession,
    clock: Clock,
    account: StudentAccount,
    plan: EnrollmentPlan,
) -> ReconcileResult:
    """Walk the absence history oldest first and tag what exceeds the plan cap.

    Previously tagged overflow absences are never un-tagged here; removing tags
    is an explicit remediation. Flushes but does not commit.
    """
    plan_max = get_max_pending_for_plan(plan)
    snapshot = await get_snapshot(db, clock, account.id)
    items = await repository.find_absence_entries(db, account.id)

    countable = 0
    # Oldest absences are treated as already recovered by existing bookings
    to_skip = min(snapshot.booked_count, len(items))
    updates: List[TagUpdate] = []
    tagged = 0
    cleared = 0

    for item in items:
        entry = item.entry
        if entry.is_overflow_absence:
            continue
        if to_skip > 0:
            to_skip -= 1
            continue
        if should_overflow_new_absence(countable, plan_max):
            updates.append(TagUpdate(entry=entry, tag=AbsenceTag(OverflowReason.PLAN_DOWNGRADE)))
            tagged += 1
            continue
        countable += 1
        if entry.overflow_reason:
            updates.append(TagUpdate(entry=entry, tag=COUNTABLE))
            cleared += 1

    await repository.persist_tag_updates(db, updates)
    if updates:
        logger.info(
            "Overflow reconciled for student %s on plan %s: %d tagged, %d cleared",
            account.id, plan.value, tagged, cleared,
        )
    return ReconcileResult(
        student_id=account.id,
        plan=plan.value,
        plan_max=plan_max,
        scanned=len(items),
        countable=countable,
        tagged=tagged,
        cleared=cleared,
    )


async def reconcile_after_plan_change(
    db: AsyncSession,
    clock: Clock,
    student_id: UUID,
    new_plan: Union[str, EnrollmentPlan],
) -> ReconcileResult:
    """Re-derive overflow tags for a student after their plan changed."""
    plan = parse_plan(new_plan)
    # Row lock serializes concurrent reconciliations of the same student
    account = await repository.get_account(db, student_id, for_update=True)
    result = await reconcile_account(db, clock, account, plan)
    await db.commit()
    return result
