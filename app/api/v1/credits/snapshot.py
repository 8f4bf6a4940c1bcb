"""Absence counting, booking ledger and the snapshot that reconciles them."""

from typing import Dict, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.logging import get_logger

from . import repository
from .schemas import Snapshot

logger = get_logger(__name__)


def build_snapshot(absences_count: int, booked_count: int, adjustment_booked_count: int) -> Snapshot:
    """Combine raw counts into a consistent snapshot.

    Only bookings paid with an absence-earned credit consume absences; bookings
    paid with a manual adjustment credit must not also reduce the absence pool.
    """
    non_adjustment_booked = max(0, booked_count - adjustment_booked_count)
    consumed_absences = min(absences_count, non_adjustment_booked)
    pending_absences = max(0, absences_count - consumed_absences)
    return Snapshot(
        absences_count=absences_count,
        booked_count=booked_count,
        adjustment_booked_count=adjustment_booked_count,
        consumed_absences=consumed_absences,
        pending_absences=pending_absences,
    )


# ----- Absences -----
async def count_absences(db: AsyncSession, clock: Clock, student_id: UUID) -> int:
    """Countable absences over the whole history, up to the end of yesterday."""
    counts = await repository.count_countable_absences(db, [student_id], clock.yesterday_end_of_day())
    return counts.get(student_id, 0)


async def count_absences_for_many(db: AsyncSession, clock: Clock, student_ids: Iterable[UUID]) -> Dict[UUID, int]:
    ids = list(dict.fromkeys(student_ids))
    counts = await repository.count_countable_absences(db, ids, clock.yesterday_end_of_day())
    return {student_id: counts.get(student_id, 0) for student_id in ids}


# ----- Bookings -----
async def count_active_bookings(db: AsyncSession, student_id: UUID) -> int:
    return await repository.count_active_bookings(db, student_id)


async def count_active_adjustment_bookings(db: AsyncSession, student_id: UUID) -> int:
    return await repository.count_active_with_adjustment(db, student_id)


# ----- Snapshot -----
async def get_snapshot(db: AsyncSession, clock: Clock, student_id: UUID) -> Snapshot:
    absences_count = await count_absences(db, clock, student_id)
    booked_count = await count_active_bookings(db, student_id)
    adjustment_booked_count = await count_active_adjustment_bookings(db, student_id)
    snapshot = build_snapshot(absences_count, booked_count, adjustment_booked_count)
    logger.debug("Snapshot for student %s: %s", student_id, snapshot.model_dump())
    return snapshot


async def get_snapshots_for_many(
    db: AsyncSession,
    clock: Clock,
    student_ids: Iterable[UUID],
) -> Dict[UUID, Snapshot]:
    """Batched snapshots; every requested id gets an entry, identical to get_snapshot."""
    ids = list(dict.fromkeys(student_ids))
    if not ids:
        return {}
    absences = await count_absences_for_many(db, clock, ids)
    bookings = await repository.count_active_bookings_for_many(db, ids)
    snapshots: Dict[UUID, Snapshot] = {}
    for student_id in ids:
        booked_count, adjustment_booked_count = bookings.get(student_id, (0, 0))
        snapshots[student_id] = build_snapshot(absences[student_id], booked_count, adjustment_booked_count)
    return snapshots
