#!/usr/bin/env python3
"""Print the contents of the leave management database.

Shows every user (without password hashes), every leave (newest first) and
the per-status leave counts.

Usage:
    python scripts/view_database.py
    python scripts/view_database.py --json     # machine-readable output
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from sqlalchemy import select

from leave_management.auth.models import User
from leave_management.auth.schemas import UserOut
from leave_management.database import async_session_factory, engine
from leave_management.leave.models import Leave
from leave_management.leave.schemas import LeaveOut
from leave_management.leave.service import LeaveService

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("view_database")


async def collect() -> dict[str, Any]:
    async with async_session_factory() as db:
        users = (await db.execute(select(User).order_by(User.id))).scalars().all()
        leaves = (
            await db.execute(select(Leave).order_by(Leave.created_at.desc(), Leave.id.desc()))
        ).scalars().all()
        stats = await LeaveService.get_stats(db)

    await engine.dispose()
    return {
        "users": [UserOut.model_validate(u).model_dump(mode="json") for u in users],
        "leaves": [LeaveOut.model_validate(lv).model_dump(mode="json") for lv in leaves],
        "stats": stats.model_dump(),
    }


def _print_table(title: str, rows: list[dict[str, Any]], columns: list[str]) -> None:
    print(f"\n{title}")
    print("=" * 50)
    if not rows:
        print("(none)")
        return
    widths = {c: max(len(c), *(len(str(r.get(c, ""))) for r in rows)) for c in columns}
    print("  ".join(c.ljust(widths[c]) for c in columns))
    print("  ".join("-" * widths[c] for c in columns))
    for row in rows:
        print("  ".join(str(row.get(c, "")).ljust(widths[c]) for c in columns))


def main() -> int:
    parser = argparse.ArgumentParser(description="View users, leaves and leave statistics")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of tables")
    args = parser.parse_args()

    try:
        data = asyncio.run(collect())
    except Exception:
        logger.exception("Could not read the database")
        return 1

    if args.json:
        print(json.dumps(data, indent=2))
        return 0

    _print_table("USERS", data["users"], ["id", "username", "email", "role", "created_at"])
    _print_table(
        "LEAVES",
        data["leaves"],
        ["id", "user_id", "employee_name", "leave_type", "from_date", "to_date", "status"],
    )
    stats = data["stats"]
    _print_table(
        "LEAVE STATISTICS",
        [{"status": s.capitalize(), "count": stats[s]} for s in ("pending", "approved", "rejected", "total")],
        ["status", "count"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
