from typing import Optional

from app.core.enums import AccountStatus
from app.core.models import StudentAccount

from .policy import get_max_pending_for_plan, plan_label
from .schemas import ZERO_SNAPSHOT, AvailableCreditsInfo, Snapshot


def is_frozen(account: StudentAccount) -> bool:
    """Frozen accounts (not active, or without a plan) cannot accrue absence credits."""
    return account.status != AccountStatus.ACTIVE.value or not account.enrollment_plan


def needs_snapshot(account: StudentAccount) -> bool:
    """Frozen and trial accounts never use absence history; skip the scan for them."""
    return not is_frozen(account) and not account.is_trial


def adjustment_net(account: StudentAccount) -> int:
    return (account.recovery_credits_adjustment or 0) - (account.used_recovery_adjustment_credits or 0)


def compute_available_credits(account: StudentAccount, snapshot: Optional[Snapshot] = None) -> AvailableCreditsInfo:
    """Final credit balance for an account.

    Absence-earned credits are capped by the plan and zeroed for frozen or trial
    accounts. Manual adjustment credits always apply. The net adjustment is not
    clamped so that bookkeeping errors stay visible.
    """
    frozen = is_frozen(account)
    max_pending = get_max_pending_for_plan(account.enrollment_plan)
    effective = ZERO_SNAPSHOT if frozen or account.is_trial else (snapshot or ZERO_SNAPSHOT)

    credits_from_absences = min(effective.pending_absences, max_pending)
    adjustment_total = account.recovery_credits_adjustment or 0
    adjustment_used = account.used_recovery_adjustment_credits or 0
    net = adjustment_total - adjustment_used

    return AvailableCreditsInfo(
        plan=plan_label(account.enrollment_plan),
        max_pending=max_pending,
        credits_from_absences=credits_from_absences,
        adjustment=net,
        adjustment_total=adjustment_total,
        adjustment_used=adjustment_used,
        booked_count=effective.booked_count,
        adjustment_booked_count=effective.adjustment_booked_count,
        absences_count=effective.absences_count,
        consumed_absences=effective.consumed_absences,
        pending_absences=effective.pending_absences,
        total_credits=credits_from_absences + net,
        is_frozen=frozen,
    )
