"""Leave service layer — submission, listing, owner edits, admin decisions.

Business logic:
  - Employees submit requests (always Pending) and may edit them while Pending
  - Employees see only their own records; admins see everything
  - Admin decisions are a compare-and-set on ``status``: only a Pending leave
    can move, so the first of two racing decisions wins
  - Pagination clamps the window to page >= 1 and 1 <= limit <= 100
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leave_management.auth.schemas import TokenPayload
from leave_management.common.constants import STATUS_FILTER_ALL, LeaveStatus
from leave_management.common.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leave_management.common.pagination import (
    PaginatedResponse,
    build_page,
    clamp_limit,
    clamp_page,
    page_offset,
)
from leave_management.leave.models import Leave
from leave_management.leave.schemas import (
    DATE_ORDER_MESSAGE,
    LeaveCreate,
    LeaveOut,
    LeaveStats,
    LeaveUpdate,
)

logger = logging.getLogger(__name__)


def parse_status_filter(value: Optional[str]) -> Optional[LeaveStatus]:
    """Map the ``status`` query value to a filter; ``all`` / empty means none."""
    if not value or value == STATUS_FILTER_ALL:
        return None
    try:
        return LeaveStatus(value)
    except ValueError:
        raise ValidationException({"status": [f"Invalid status filter '{value}'."]})


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: create, read, paginate, edit, decide."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_or_404(db: AsyncSession, leave_id: int) -> Leave:
        leave = await db.get(Leave, leave_id)
        if leave is None:
            raise NotFoundException("Leave", leave_id)
        return leave

    @staticmethod
    async def _paginate(
        db: AsyncSession,
        conditions: Sequence[Any],
        page: Optional[int],
        limit: Optional[int],
    ) -> PaginatedResponse[LeaveOut]:
        page_num = clamp_page(page)
        limit_num = clamp_limit(limit)

        count_q = select(func.count()).select_from(Leave).where(*conditions)
        total = (await db.execute(count_q)).scalar_one()

        rows_q = (
            select(Leave)
            .where(*conditions)
            .order_by(Leave.created_at.desc(), Leave.id.desc())
            .offset(page_offset(page_num, limit_num))
            .limit(limit_num)
        )
        rows = (await db.execute(rows_q)).scalars().all()

        return build_page(
            [LeaveOut.model_validate(r) for r in rows],
            total=total,
            page=page_num,
            limit=limit_num,
        )

    # ─────────────────────────────────────────────────────────────────
    # Create
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_leave(
        db: AsyncSession,
        user_id: int,
        body: LeaveCreate,
    ) -> LeaveOut:
        """Insert a new Pending leave owned by *user_id*."""
        leave = Leave(
            user_id=user_id,
            employee_name=body.employee_name,
            leave_type=body.leave_type,
            from_date=body.from_date,
            to_date=body.to_date,
            reason=body.reason,
            status=LeaveStatus.pending,
        )
        db.add(leave)
        await db.flush()

        logger.info(
            "Leave %s submitted by user %s (%s, %s → %s)",
            leave.id, user_id, leave.leave_type.value, leave.from_date, leave.to_date,
        )
        return LeaveOut.model_validate(leave)

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave(
        db: AsyncSession,
        leave_id: int,
        current_user: TokenPayload,
    ) -> LeaveOut:
        """Return a leave; non-admins may only read their own."""
        leave = await LeaveService._get_or_404(db, leave_id)
        if not current_user.is_admin and leave.user_id != current_user.user_id:
            raise ForbiddenException("Access denied.")
        return LeaveOut.model_validate(leave)

    @staticmethod
    async def get_leaves_by_status(
        db: AsyncSession,
        status: LeaveStatus,
    ) -> list[LeaveOut]:
        """All leaves in *status*, newest first (unpaginated)."""
        result = await db.execute(
            select(Leave)
            .where(Leave.status == status)
            .order_by(Leave.created_at.desc(), Leave.id.desc())
        )
        return [LeaveOut.model_validate(r) for r in result.scalars().all()]

    @staticmethod
    async def get_all_leaves(
        db: AsyncSession,
        *,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> PaginatedResponse[LeaveOut]:
        """Admin scope: every leave, optionally filtered by status."""
        conditions = []
        if status is not None:
            conditions.append(Leave.status == status)
        return await LeaveService._paginate(db, conditions, page, limit)

    @staticmethod
    async def get_user_leaves(
        db: AsyncSession,
        user_id: int,
        *,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> PaginatedResponse[LeaveOut]:
        """Owner scope: only *user_id*'s leaves."""
        conditions = [Leave.user_id == user_id]
        if status is not None:
            conditions.append(Leave.status == status)
        return await LeaveService._paginate(db, conditions, page, limit)

    @staticmethod
    async def list_leaves(
        db: AsyncSession,
        current_user: TokenPayload,
        *,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> PaginatedResponse[LeaveOut]:
        if current_user.is_admin:
            return await LeaveService.get_all_leaves(
                db, page=page, limit=limit, status=status,
            )
        return await LeaveService.get_user_leaves(
            db, current_user.user_id, page=page, limit=limit, status=status,
        )

    @staticmethod
    async def get_stats(
        db: AsyncSession,
        user_id: Optional[int] = None,
    ) -> LeaveStats:
        """Per-status counts across all leaves, or one user's when given."""
        query = select(Leave.status, func.count()).group_by(Leave.status)
        if user_id is not None:
            query = query.where(Leave.user_id == user_id)
        counts = {status: count for status, count in (await db.execute(query)).all()}

        stats = LeaveStats(
            pending=counts.get(LeaveStatus.pending, 0),
            approved=counts.get(LeaveStatus.approved, 0),
            rejected=counts.get(LeaveStatus.rejected, 0),
        )
        stats.total = stats.pending + stats.approved + stats.rejected
        return stats

    # ─────────────────────────────────────────────────────────────────
    # Owner edit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def update_leave(
        db: AsyncSession,
        leave_id: int,
        current_user: TokenPayload,
        body: LeaveUpdate,
    ) -> LeaveOut:
        """Apply the owner's edits. Only Pending leaves can be edited."""
        leave = await LeaveService._get_or_404(db, leave_id)
        if leave.user_id != current_user.user_id:
            raise ForbiddenException("Only the owner can edit this leave request.")
        if not leave.is_pending:
            raise ValidationException(
                {"status": [f"Leave request is already {leave.status.value} and can no longer be edited."]}
            )

        changes = body.changes()
        from_date = changes.get("from_date", leave.from_date)
        to_date = changes.get("to_date", leave.to_date)
        if to_date < from_date:
            raise ValidationException({"to_date": [DATE_ORDER_MESSAGE]})

        result = await db.execute(
            update(Leave)
            .where(
                Leave.id == leave_id,
                Leave.user_id == current_user.user_id,
                Leave.status == LeaveStatus.pending,
            )
            .values(**changes, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # An admin decided the leave between our read and our write
            raise ValidationException(
                {"status": ["Leave request was decided while it was being edited."]}
            )

        leave = await db.get(Leave, leave_id, populate_existing=True)
        logger.info("Leave %s edited by user %s: %s", leave_id, current_user.user_id, sorted(changes))
        return LeaveOut.model_validate(leave)

    # ─────────────────────────────────────────────────────────────────
    # Admin decisions
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def update_leave_status(
        db: AsyncSession,
        leave_id: int,
        status: LeaveStatus,
        *,
        actor_id: Optional[int] = None,
    ) -> LeaveOut:
        """Move a Pending leave to *status* and bump ``updated_at``.

        Re-applying the status a leave already has (including Pending on a
        Pending leave) returns it unchanged.
        Any other change to a decided leave is rejected with 400.
        """
        result = await db.execute(
            update(Leave)
            .where(
                Leave.id == leave_id,
                Leave.status == LeaveStatus.pending,
                Leave.status != status,
            )
            .values(status=status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 1:
            leave = await db.get(Leave, leave_id, populate_existing=True)
            logger.info(
                "Leave %s set to %s by user %s", leave_id, status.value, actor_id,
            )
            return LeaveOut.model_validate(leave)

        leave = await db.get(Leave, leave_id, populate_existing=True)
        if leave is None:
            raise NotFoundException("Leave", leave_id)
        if leave.status == status:
            return LeaveOut.model_validate(leave)

        raise ValidationException(
            {"status": [f"Leave request is already {leave.status.value}."]}
        )

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        leave_id: int,
        *,
        actor_id: Optional[int] = None,
    ) -> LeaveOut:
        return await LeaveService.update_leave_status(
            db, leave_id, LeaveStatus.approved, actor_id=actor_id,
        )

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        leave_id: int,
        *,
        actor_id: Optional[int] = None,
    ) -> LeaveOut:
        return await LeaveService.update_leave_status(
            db, leave_id, LeaveStatus.rejected, actor_id=actor_id,
        )
