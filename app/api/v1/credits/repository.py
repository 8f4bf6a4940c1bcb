"""Storage access for attendance entries, recovery bookings and student accounts."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ABSENCE_STATUSES, BookingStatus, RecordStatus
from app.core.exceptions import NotFound
from app.core.models import AbsenceTag, RecoveryClass, StudentAccount, StudentAttendance, StudentAttendanceEntry


@dataclass(frozen=True)
class AbsenceItem:
    """Absence entry together with its parent record's class date."""

    entry: StudentAttendanceEntry
    class_date: datetime

    @property
    def record_id(self) -> UUID:
        return self.entry.student_attendance_id


@dataclass(frozen=True)
class TagUpdate:
    entry: StudentAttendanceEntry
    tag: AbsenceTag

    @property
    def entry_id(self) -> UUID:
        return self.entry.id


def _absence_candidate_filters(student_ids: List[UUID]) -> list:
    """Absent/sick entries of active records that are neither day-only nor recovery."""
    return [
        StudentAttendance.status == RecordStatus.ACTIVE.value,
        StudentAttendanceEntry.student_id.in_(student_ids),
        StudentAttendanceEntry.attendance_status.in_(ABSENCE_STATUSES),
        StudentAttendanceEntry.is_day_only.is_(False),
        StudentAttendanceEntry.is_recovery.is_(False),
    ]


# ----- AttendanceStore -----
async def find_absence_entries(
    db: AsyncSession,
    student_id: UUID,
    before: Optional[datetime] = None,
) -> List[AbsenceItem]:
    """Absence candidates for a student (overflow ones included), oldest first."""
    q = (
        select(StudentAttendanceEntry, StudentAttendance.class_date)
        .join(StudentAttendance, StudentAttendanceEntry.student_attendance_id == StudentAttendance.id)
        .where(*_absence_candidate_filters([student_id]))
    )
    if before is not None:
        q = q.where(StudentAttendance.class_date <= before)
    q = q.order_by(
        StudentAttendance.class_date.asc(),
        StudentAttendance.created_at.asc(),
        StudentAttendanceEntry.position.asc(),
    )
    result = await db.execute(q)
    return [AbsenceItem(entry=entry, class_date=class_date) for entry, class_date in result.all()]


async def count_countable_absences(
    db: AsyncSession,
    student_ids: Iterable[UUID],
    before: datetime,
) -> Dict[UUID, int]:
    """Countable absences per student up to `before`; students without any are omitted."""
    ids = list(student_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(StudentAttendanceEntry.student_id, func.count(StudentAttendanceEntry.id))
        .join(StudentAttendance, StudentAttendanceEntry.student_attendance_id == StudentAttendance.id)
        .where(
            *_absence_candidate_filters(ids),
            StudentAttendanceEntry.is_overflow_absence.is_(False),
            StudentAttendance.class_date <= before,
        )
        .group_by(StudentAttendanceEntry.student_id)
    )
    return {student_id: count for student_id, count in result.all()}


async def persist_tag_updates(db: AsyncSession, updates: List[TagUpdate]) -> int:
    """Apply overflow tag changes in one flush. Caller must commit."""
    for update in updates:
        update.entry.apply_tag(update.tag)
    if updates:
        await db.flush()
    return len(updates)


# ----- BookingStore -----
async def count_active_bookings(db: AsyncSession, student_id: UUID) -> int:
    result = await db.execute(
        select(func.count(RecoveryClass.id)).where(
            RecoveryClass.student_id == student_id,
            RecoveryClass.status == BookingStatus.ACTIVE.value,
        )
    )
    return result.scalar_one()


async def count_active_with_adjustment(db: AsyncSession, student_id: UUID) -> int:
    result = await db.execute(
        select(func.count(RecoveryClass.id)).where(
            RecoveryClass.student_id == student_id,
            RecoveryClass.status == BookingStatus.ACTIVE.value,
            RecoveryClass.used_adjustment.is_(True),
        )
    )
    return result.scalar_one()


async def count_active_bookings_for_many(
    db: AsyncSession,
    student_ids: Iterable[UUID],
) -> Dict[UUID, Tuple[int, int]]:
    """(booked, booked with adjustment) per student; students without bookings are omitted."""
    ids = list(student_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(
            RecoveryClass.student_id,
            func.count(RecoveryClass.id),
            func.sum(case((RecoveryClass.used_adjustment.is_(True), 1), else_=0)),
        )
        .where(
            RecoveryClass.student_id.in_(ids),
            RecoveryClass.status == BookingStatus.ACTIVE.value,
        )
        .group_by(RecoveryClass.student_id)
    )
    return {
        student_id: (booked or 0, int(adjustment_booked or 0))
        for student_id, booked, adjustment_booked in result.all()
    }


# ----- AccountStore -----
async def get_account(db: AsyncSession, student_id: UUID, for_update: bool = False) -> StudentAccount:
    q = select(StudentAccount).where(StudentAccount.id == student_id)
    if for_update:
        q = q.with_for_update()
    account = (await db.execute(q)).scalar_one_or_none()
    if not account:
        raise NotFound()
    return account


async def get_accounts(db: AsyncSession, student_ids: Iterable[UUID]) -> Dict[UUID, StudentAccount]:
    ids = list(student_ids)
    if not ids:
        return {}
    result = await db.execute(select(StudentAccount).where(StudentAccount.id.in_(ids)))
    return {account.id: account for account in result.scalars().all()}
