import pytest

from app.api.v1.credits.policy import (
    get_max_pending_for_plan,
    parse_plan,
    plan_label,
    should_overflow_new_absence,
)
from app.core.enums import EnrollmentPlan
from app.core.exceptions import InvalidPlan


def test_max_pending_per_plan() -> None:
    assert get_max_pending_for_plan("Basic") == 2
    assert get_max_pending_for_plan("Optimum") == 4
    assert get_max_pending_for_plan("Plus") == 6
    assert get_max_pending_for_plan(EnrollmentPlan.ADVANCED) == 8


def test_missing_or_unknown_plan_defaults_to_optimum_cap() -> None:
    assert get_max_pending_for_plan(None) == 4
    assert get_max_pending_for_plan("") == 4
    assert get_max_pending_for_plan("Platinum") == 4
    assert plan_label(None) == "Optimum"


def test_parse_plan_rejects_unknown_names() -> None:
    assert parse_plan("Plus") is EnrollmentPlan.PLUS
    with pytest.raises(InvalidPlan) as exc:
        parse_plan("basic")
    assert exc.value.status_code == 400


def test_should_overflow_new_absence_at_cap() -> None:
    assert should_overflow_new_absence(1, 2) is False
    assert should_overflow_new_absence(2, 2) is True
    assert should_overflow_new_absence(3, 2) is True
