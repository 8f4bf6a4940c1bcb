import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta
from typing import AsyncGenerator, Optional
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.clock import FixedClock, get_clock
from app.core.enums import BookingStatus, RecordStatus
from app.core.models import RecoveryClass, StudentAccount, StudentAttendance, StudentAttendanceEntry
from app.db.session import build_engine, build_sessionmaker, create_tables, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
SCHOOL_TZ = ZoneInfo("America/Chicago")
NOW = datetime(2025, 9, 5, 12, 0, tzinfo=SCHOOL_TZ)
TODAY_CLASS = datetime(2025, 9, 5, 18, 0)


def days_ago(days: int, hour: int = 18) -> datetime:
    """Naive civil class date `days` before the pinned test day."""
    return datetime(2025, 9, 5, hour, 0) - timedelta(days=days)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test; every session from the factory shares it."""
    engine = build_engine(TEST_DATABASE_URL)
    await create_tables(engine)
    yield build_sessionmaker(engine)
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session used by the test and by the FastAPI session dependency."""
    async with session_factory() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def client(db_session: AsyncSession, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app with the pinned clock."""
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture()
def make_student(db_session: AsyncSession):
    async def _make(
        enrollment_plan: Optional[str] = "Optimum",
        status: str = "active",
        is_trial: bool = False,
        adjustment_total: int = 0,
        adjustment_used: int = 0,
        full_name: str = "Test Student",
    ) -> StudentAccount:
        student = StudentAccount(
            full_name=full_name,
            enrollment_plan=enrollment_plan,
            status=status,
            is_trial=is_trial,
            recovery_credits_adjustment=adjustment_total,
            used_recovery_adjustment_credits=adjustment_used,
        )
        db_session.add(student)
        await db_session.commit()
        return student

    return _make


@pytest.fixture()
def add_attendance(db_session: AsyncSession):
    async def _add(
        student: StudentAccount,
        class_date: datetime,
        attendance_status: str = "absent",
        is_day_only: bool = False,
        is_recovery: bool = False,
        is_overflow_absence: bool = False,
        overflow_reason: Optional[str] = None,
        record_status: str = RecordStatus.ACTIVE.value,
    ) -> StudentAttendanceEntry:
        entry = StudentAttendanceEntry(
            student_id=student.id,
            position=0,
            attendance_status=attendance_status,
            is_day_only=is_day_only,
            is_recovery=is_recovery,
            is_overflow_absence=is_overflow_absence,
            overflow_reason=overflow_reason,
        )
        record = StudentAttendance(class_date=class_date, status=record_status, entries=[entry])
        db_session.add(record)
        await db_session.commit()
        return entry

    return _add


@pytest.fixture()
def add_booking(db_session: AsyncSession):
    async def _add(
        student: StudentAccount,
        used_adjustment: bool = False,
        status: str = BookingStatus.ACTIVE.value,
        class_date: Optional[datetime] = None,
    ) -> RecoveryClass:
        booking = RecoveryClass(
            student_id=student.id,
            karate_class_id=uuid.uuid4(),
            class_date=class_date or datetime(2025, 9, 10, 18, 0),
            status=status,
            used_adjustment=used_adjustment,
        )
        db_session.add(booking)
        await db_session.commit()
        return booking

    return _add
