"""
Remove overflow tags with a given reason, e.g. tags written under an old plan-cap policy.

Reconciliation never un-tags overflow absences, so this is the explicit way to do it.
Usage: python -m app.scripts.clear_overflow --reason plan-cap [--student-id UUID] [--normalize]
"""

import argparse
import asyncio
from typing import Optional
from uuid import UUID

from app.api.v1.maintenance.service import clear_overflow_by_reason, normalize_reasonless_overflow
from app.core.logging import setup_logging
from app.db.session import AsyncSessionLocal


async def clear_overflow(reason: str, student_id: Optional[UUID], normalize: bool) -> None:
    async with AsyncSessionLocal() as session:
        result = await clear_overflow_by_reason(session, reason, student_id)
        print(f"Overflow {reason} cleared: matched={result.matched} modified={result.modified}")
        if normalize:
            fixed = await normalize_reasonless_overflow(session)
            print(f"Overflow without reason normalized: matched={fixed.matched} modified={fixed.modified}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--reason", required=True, help="overflow reason to clear (plan-cap, plan-downgrade)")
    parser.add_argument("--student-id", type=UUID, default=None, help="only this student")
    parser.add_argument("--normalize", action="store_true", help="also reset overflow flags without a reason")
    args = parser.parse_args()
    setup_logging()
    asyncio.run(clear_overflow(args.reason, args.student_id, args.normalize))


if __name__ == "__main__":
    main()
