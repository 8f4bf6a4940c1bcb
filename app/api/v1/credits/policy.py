"""Enrollment plan caps on pending (absence-earned) recovery credits."""

from typing import Dict, Optional, Union

from app.core.enums import EnrollmentPlan
from app.core.exceptions import InvalidPlan

PLAN_TO_MAX_PENDING: Dict[EnrollmentPlan, int] = {
    EnrollmentPlan.BASIC: 2,
    EnrollmentPlan.OPTIMUM: 4,
    EnrollmentPlan.PLUS: 6,
    EnrollmentPlan.ADVANCED: 8,
}

# Label and cap used when an account has no plan (such accounts are frozen anyway)
DEFAULT_PLAN = EnrollmentPlan.OPTIMUM


def parse_plan(value: Union[str, EnrollmentPlan, None]) -> EnrollmentPlan:
    """Validate a plan name coming from a plan-change request."""
    if isinstance(value, EnrollmentPlan):
        return value
    try:
        return EnrollmentPlan(value)
    except ValueError:
        raise InvalidPlan(value)


def get_max_pending_for_plan(plan: Union[str, EnrollmentPlan, None]) -> int:
    if not plan:
        return PLAN_TO_MAX_PENDING[DEFAULT_PLAN]
    try:
        return PLAN_TO_MAX_PENDING[EnrollmentPlan(plan)]
    except ValueError:
        return PLAN_TO_MAX_PENDING[DEFAULT_PLAN]


def should_overflow_new_absence(current_pending: int, plan_max_pending: int) -> bool:
    """Once the pending pool is at the cap, the next absence is overflow."""
    return current_pending >= plan_max_pending


def plan_label(plan: Optional[str]) -> str:
    return plan if plan else DEFAULT_PLAN.value
