from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.logging import get_logger

from ..credits import repository
from ..credits.overflow import reconcile_account
from ..credits.policy import parse_plan
from ..credits.service import credits_for_account
from .schemas import PlanChangeResponse

logger = get_logger(__name__)


async def change_enrollment_plan(
    db: AsyncSession,
    clock: Clock,
    student_id: UUID,
    enrollment_plan: str,
) -> PlanChangeResponse:
    """Store a new plan and re-derive overflow tags in the same transaction."""
    plan = parse_plan(enrollment_plan)
    account = await repository.get_account(db, student_id, for_update=True)
    previous_plan = account.enrollment_plan
    account.enrollment_plan = plan.value
    reconciliation = await reconcile_account(db, clock, account, plan)
    await db.commit()

    logger.info("Student %s plan changed from %s to %s", student_id, previous_plan, plan.value)
    credits = await credits_for_account(db, clock, account)
    return PlanChangeResponse(
        student_id=student_id,
        previous_plan=previous_plan,
        enrollment_plan=plan.value,
        reconciliation=reconciliation,
        credits=credits,
    )
