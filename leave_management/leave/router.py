"""Leave router — apply, list, view, edit, approve/reject.

All endpoints require authentication. Decision endpoints are admin-only.
"""


from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leave_management.auth.dependencies import get_current_user, require_admin
from leave_management.auth.schemas import TokenPayload
from leave_management.common.pagination import PaginatedResponse, PaginationParams
from leave_management.database import get_db
from leave_management.leave.schemas import (
    LeaveCreate,
    LeaveOut,
    LeaveStats,
    LeaveStatusUpdate,
    LeaveUpdate,
)
from leave_management.leave.service import LeaveService, parse_status_filter

router = APIRouter(prefix="", tags=["leave"])

STATUS_FILTER_PATTERN = "^(all|Pending|Approved|Rejected)$"


# ── POST /apply-leave ───────────────────────────────────────────────

@router.post("/apply-leave", response_model=LeaveOut, status_code=201)
async def apply_leave(
    body: LeaveCreate,
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request for the authenticated user (status Pending)."""
    return await LeaveService.create_leave(db, current_user.user_id, body)


# ── GET /leaves ─────────────────────────────────────────────────────

@router.get("/leaves", response_model=PaginatedResponse[LeaveOut])
async def list_leaves(
    pagination: PaginationParams = Depends(),
    status: Optional[str] = Query(None, pattern=STATUS_FILTER_PATTERN),
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Employees get their own leaves; admins get every leave."""
    return await LeaveService.list_leaves(
        db,
        current_user,
        page=pagination.page,
        limit=pagination.limit,
        status=parse_status_filter(status),
    )


# ── GET /leaves/stats ───────────────────────────────────────────────

@router.get("/leaves/stats", response_model=LeaveStats)
async def leave_stats(
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user_id = None if current_user.is_admin else current_user.user_id
    return await LeaveService.get_stats(db, user_id)


# ── GET /leaves/{id} ────────────────────────────────────────────────

@router.get("/leaves/{leave_id}", response_model=LeaveOut)
async def get_leave(
    leave_id: int = Path(..., ge=1),
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_leave(db, leave_id, current_user)


# ── PUT /leaves/{id} ────────────────────────────────────────────────

@router.put("/leaves/{leave_id}", response_model=LeaveOut)
async def update_leave(
    body: LeaveUpdate,
    leave_id: int = Path(..., ge=1),
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Edit your own leave request while it is still Pending."""
    return await LeaveService.update_leave(db, leave_id, current_user, body)


# ── PUT /leaves/{id}/approve ────────────────────────────────────────

@router.put("/leaves/{leave_id}/approve", response_model=LeaveOut)
async def approve_leave(
    leave_id: int = Path(..., ge=1),
    admin: TokenPayload = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.approve_leave(db, leave_id, actor_id=admin.user_id)


# ── PUT /leaves/{id}/reject ─────────────────────────────────────────

@router.put("/leaves/{leave_id}/reject", response_model=LeaveOut)
async def reject_leave(
    leave_id: int = Path(..., ge=1),
    admin: TokenPayload = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.reject_leave(db, leave_id, actor_id=admin.user_id)


# ── PUT /leaves/{id}/status ─────────────────────────────────────────

@router.put("/leaves/{leave_id}/status", response_model=LeaveOut)
async def set_leave_status(
    body: LeaveStatusUpdate,
    leave_id: int = Path(..., ge=1),
    admin: TokenPayload = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.update_leave_status(
        db, leave_id, body.status, actor_id=admin.user_id,
    )
