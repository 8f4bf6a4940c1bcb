"""
Re-run overflow reconciliation against each student's current plan.

Idempotent: a second run changes nothing. Without --student-id, all active students are processed.
Usage: python -m app.scripts.reconcile_overflow [--student-id UUID ...]
"""

import argparse
import asyncio
import sys
from typing import List
from uuid import UUID

from app.api.v1.maintenance.service import list_active_student_ids, reconcile_many
from app.core.clock import Clock
from app.core.logging import setup_logging
from app.db.session import AsyncSessionLocal


async def reconcile_overflow(student_ids: List[UUID]) -> int:
    async with AsyncSessionLocal() as session:
        if not student_ids:
            student_ids = await list_active_student_ids(session)
        if not student_ids:
            print("No students to reconcile. Exiting.")
            return 0

        print(f"Reconciling {len(student_ids)} student(s)...")
        result = await reconcile_many(session, Clock(), student_ids)

        tagged = sum(r.tagged for r in result.reconciled)
        cleared = sum(r.cleared for r in result.reconciled)
        for failure in result.failed:
            print(f"  FAILED: {failure.student_id}: {failure.error}", file=sys.stderr)
        print(f"Done. matched={len(result.reconciled)} tagged={tagged} cleared={cleared} failed={len(result.failed)}")
        return 1 if result.failed else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Re-run overflow reconciliation.")
    parser.add_argument("--student-id", dest="student_ids", type=UUID, action="append", default=[])
    args = parser.parse_args()
    setup_logging()
    sys.exit(asyncio.run(reconcile_overflow(args.student_ids)))


if __name__ == "__main__":
    main()
