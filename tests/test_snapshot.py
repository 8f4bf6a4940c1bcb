"""Absence counting, booking ledger and snapshot reconciliation."""

from datetime import datetime

import pytest

from app.api.v1.credits.snapshot import (
    build_snapshot,
    count_absences,
    count_absences_for_many,
    count_active_adjustment_bookings,
    count_active_bookings,
    get_snapshot,
    get_snapshots_for_many,
)

from conftest import TODAY_CLASS, days_ago


def test_adjustment_bookings_do_not_consume_absences() -> None:
    snap = build_snapshot(absences_count=3, booked_count=2, adjustment_booked_count=2)
    assert snap.consumed_absences == 0
    assert snap.pending_absences == 3


def test_plain_bookings_consume_absences() -> None:
    snap = build_snapshot(absences_count=3, booked_count=2, adjustment_booked_count=0)
    assert snap.consumed_absences == 2
    assert snap.pending_absences == 1


def test_more_bookings_than_absences_clamps() -> None:
    snap = build_snapshot(absences_count=1, booked_count=4, adjustment_booked_count=1)
    assert snap.consumed_absences == 1
    assert snap.pending_absences == 0


def test_no_absences_means_nothing_pending() -> None:
    snap = build_snapshot(absences_count=0, booked_count=2, adjustment_booked_count=0)
    assert snap.consumed_absences == 0
    assert snap.pending_absences == 0


@pytest.mark.asyncio
async def test_count_absences_applies_countable_rules(make_student, add_attendance, db_session, clock) -> None:
    student = await make_student()
    await add_attendance(student, days_ago(1), "absent")
    await add_attendance(student, days_ago(2), "sick")
    # Not countable
    await add_attendance(student, days_ago(3), "present")
    await add_attendance(student, days_ago(4), "late")
    await add_attendance(student, days_ago(5), "absent", is_day_only=True)
    await add_attendance(student, days_ago(6), "absent", is_recovery=True)
    await add_attendance(student, days_ago(7), "absent", is_overflow_absence=True, overflow_reason="plan-cap")
    await add_attendance(student, days_ago(8), "absent", record_status="deleted")
    # Today's class has not fully elapsed yet
    await add_attendance(student, TODAY_CLASS, "absent")

    assert await count_absences(db_session, clock, student.id) == 2


@pytest.mark.asyncio
async def test_count_absences_covers_whole_history(make_student, add_attendance, db_session, clock) -> None:
    """A January absence from a previous year is still counted."""
    student = await make_student()
    await add_attendance(student, datetime(2024, 1, 15, 18, 0), "absent")
    await add_attendance(student, days_ago(1), "absent")

    assert await count_absences(db_session, clock, student.id) == 2


@pytest.mark.asyncio
async def test_batch_count_matches_single_count(make_student, add_attendance, db_session, clock) -> None:
    first = await make_student(full_name="First")
    second = await make_student(full_name="Second")
    empty = await make_student(full_name="Empty")
    await add_attendance(first, days_ago(1), "absent")
    await add_attendance(first, days_ago(10), "sick")
    await add_attendance(second, days_ago(2), "absent")
    await add_attendance(second, TODAY_CLASS, "absent")

    batch = await count_absences_for_many(db_session, clock, [first.id, second.id, empty.id])

    for student in (first, second, empty):
        assert batch[student.id] == await count_absences(db_session, clock, student.id)
    assert batch == {first.id: 2, second.id: 1, empty.id: 0}


@pytest.mark.asyncio
async def test_booking_ledger_only_counts_active(make_student, add_booking, db_session) -> None:
    student = await make_student()
    await add_booking(student)
    await add_booking(student, used_adjustment=True)
    await add_booking(student, status="deleted")
    await add_booking(student, used_adjustment=True, status="deleted")

    assert await count_active_bookings(db_session, student.id) == 2
    assert await count_active_adjustment_bookings(db_session, student.id) == 1


@pytest.mark.asyncio
async def test_snapshot_combines_absences_and_bookings(
    make_student, add_attendance, add_booking, db_session, clock
) -> None:
    student = await make_student()
    for days in (1, 2, 3):
        await add_attendance(student, days_ago(days), "absent")
    await add_booking(student)
    await add_booking(student, used_adjustment=True)

    snap = await get_snapshot(db_session, clock, student.id)
    assert snap.absences_count == 3
    assert snap.booked_count == 2
    assert snap.adjustment_booked_count == 1
    assert snap.consumed_absences == 1
    assert snap.pending_absences == 2


@pytest.mark.asyncio
async def test_batch_snapshots_match_single_snapshots(
    make_student, add_attendance, add_booking, db_session, clock
) -> None:
    first = await make_student(full_name="First")
    second = await make_student(full_name="Second")
    await add_attendance(first, days_ago(1), "absent")
    await add_attendance(first, days_ago(2), "absent")
    await add_booking(first)
    await add_booking(second, used_adjustment=True)

    snapshots = await get_snapshots_for_many(db_session, clock, [first.id, second.id, first.id])

    assert set(snapshots) == {first.id, second.id}
    for student in (first, second):
        assert snapshots[student.id] == await get_snapshot(db_session, clock, student.id)
