#!/usr/bin/env python3
"""Seed the leave management database with demo users and leave requests.

Creates one admin and nine employees (skipping any whose username or email
already exists) plus a spread of sample leaves in every status.

Usage:
    python scripts/seed_database.py                 # seed into DATABASE_URL
    python scripts/seed_database.py --reset         # drop + recreate tables first
    python scripts/seed_database.py --skip-leaves   # users only

--reset also drops the ``alembic_version`` table, so a reset database is no
longer marked as migrated. Run ``alembic stamp head`` afterwards if the
database is managed with Alembic.

Demo credentials:
    admin     rajesh.kumar@company.com / admin123
    employees <first>.<last>@company.com / employee123
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date

from sqlalchemy import func, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from leave_management.auth.models import User
from leave_management.auth.service import create_user
from leave_management.common.constants import LeaveStatus, LeaveType, UserRole
from leave_management.database import Base, async_session_factory, engine
from leave_management.leave.models import Leave

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("seed_database")

ADMIN = ("rajesh_kumar", "rajesh.kumar@company.com", "admin123")
EMPLOYEE_PASSWORD = "employee123"
EMPLOYEES = [
    ("priya_sharma", "priya.sharma@company.com"),
    ("arjun_patel", "arjun.patel@company.com"),
    ("kavya_reddy", "kavya.reddy@company.com"),
    ("vikram_singh", "vikram.singh@company.com"),
    ("ananya_gupta", "ananya.gupta@company.com"),
    ("rohit_verma", "rohit.verma@company.com"),
    ("sneha_iyer", "sneha.iyer@company.com"),
    ("aditya_joshi", "aditya.joshi@company.com"),
    ("meera_nair", "meera.nair@company.com"),
]

# (username, employee_name, type, from, to, reason, status)
SAMPLE_LEAVES = [
    ("priya_sharma", "Priya Sharma", LeaveType.annual, date(2024, 7, 15), date(2024, 7, 19),
     "Family wedding celebration in hometown", LeaveStatus.approved),
    ("arjun_patel", "Arjun Patel", LeaveType.sick, date(2024, 6, 20), date(2024, 6, 22),
     "Fever and cold symptoms, doctor advised rest", LeaveStatus.approved),
    ("kavya_reddy", "Kavya Reddy", LeaveType.personal, date(2024, 8, 1), date(2024, 8, 3),
     "House shifting and relocation work", LeaveStatus.pending),
    ("vikram_singh", "Vikram Singh", LeaveType.emergency, date(2024, 6, 10), date(2024, 6, 11),
     "Family emergency - father hospitalized", LeaveStatus.rejected),
    ("ananya_gupta", "Ananya Gupta", LeaveType.annual, date(2024, 9, 15), date(2024, 9, 25),
     "Vacation to Goa with family", LeaveStatus.pending),
    ("rohit_verma", "Rohit Verma", LeaveType.sick, date(2024, 5, 15), date(2024, 5, 16),
     "Medical checkup and treatment", LeaveStatus.approved),
    ("sneha_iyer", "Sneha Iyer", LeaveType.personal, date(2024, 7, 1), date(2024, 7, 5),
     "Sister's wedding preparations", LeaveStatus.pending),
    ("aditya_joshi", "Aditya Joshi", LeaveType.annual, date(2024, 8, 20), date(2024, 8, 30),
     "Trip to Kerala backwaters", LeaveStatus.approved),
    ("meera_nair", "Meera Nair", LeaveType.maternity, date(2024, 9, 1), date(2024, 12, 1),
     "Maternity leave for childbirth", LeaveStatus.pending),
]


async def _ensure_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    role: UserRole,
) -> tuple[User, bool]:
    """Return (user, created). Existing users are matched by username or email."""
    result = await db.execute(
        select(User).where(or_(User.username == username, User.email == email)),
    )
    existing = result.scalars().first()
    if existing is not None:
        return existing, False
    user = await create_user(db, username=username, email=email, password=password, role=role)
    return user, True


async def seed(reset: bool = False, skip_leaves: bool = False) -> int:
    if reset:
        logger.warning("Dropping and recreating all tables")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.execute(text("DROP TABLE IF EXISTS alembic_version"))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        _, created = await _ensure_user(db, *ADMIN, role=UserRole.admin)
        logger.info("%s admin user: %s", "Created" if created else "Found", ADMIN[0])

        users: dict[str, User] = {}
        for username, email in EMPLOYEES:
            user, created = await _ensure_user(
                db, username, email, EMPLOYEE_PASSWORD, UserRole.employee,
            )
            users[username] = user
            logger.info("%s employee: %s", "Created" if created else "Found", username)

        leave_count = 0
        existing_leaves = (await db.execute(select(func.count()).select_from(Leave))).scalar_one()
        if existing_leaves:
            logger.info("Found %d existing leaves, not adding samples", existing_leaves)
        elif not skip_leaves:
            for username, name, leave_type, start, end, reason, status in SAMPLE_LEAVES:
                db.add(Leave(
                    user_id=users[username].id,
                    employee_name=name,
                    leave_type=leave_type,
                    from_date=start,
                    to_date=end,
                    reason=reason,
                    status=status,
                ))
                leave_count += 1
            logger.info("Created %d sample leave requests", leave_count)

        await db.commit()

    logger.info("Seeding complete: 1 admin, %d employees, %d leaves", len(EMPLOYEES), leave_count)
    return 0


async def _run(args: argparse.Namespace) -> int:
    try:
        return await seed(reset=args.reset, skip_leaves=args.skip_leaves)
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed demo users and leave requests")
    parser.add_argument("--reset", action="store_true", help="Drop all tables (and alembic_version) before seeding")
    parser.add_argument("--skip-leaves", action="store_true", help="Create users only")
    args = parser.parse_args()

    try:
        return asyncio.run(_run(args))
    except Exception:
        logger.exception("Seeding failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
