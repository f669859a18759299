"""Pagination window arithmetic and the paginated response envelope."""


import math
from typing import Generic, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from leave_management.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
)

T = TypeVar("T")


def clamp_page(page: Optional[int]) -> int:
    """Pages are 1-indexed; anything smaller (or missing) becomes page 1."""
    if page is None:
        return 1
    return max(1, int(page))


def clamp_limit(limit: Optional[int]) -> int:
    """Keep the page size inside ``[MIN_PAGE_SIZE, MAX_PAGE_SIZE]``."""
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, int(limit)))


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


# ── FastAPI dependency ──────────────────────────────────────────────

class PaginationParams:
    """Inject via ``Depends(PaginationParams)`` on any list endpoint."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
        limit: int = Query(
            default=DEFAULT_PAGE_SIZE,
            ge=MIN_PAGE_SIZE,
            le=MAX_PAGE_SIZE,
            description=f"Items per page (max {MAX_PAGE_SIZE})",
        ),
    ) -> None:
        self.page = clamp_page(page)
        self.limit = clamp_limit(limit)

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.limit)


# ── Pydantic response model ────────────────────────────────────────

class PaginatedResponse(BaseModel, Generic[T]):
    """Standard envelope: ``{"leaves": [...], "totalCount": ..., ...}``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    leaves: Sequence[T]
    total_count: int
    current_page: int
    total_pages: int
    limit: int


def build_page(
    items: Sequence[T],
    *,
    total: int,
    page: int,
    limit: int,
) -> PaginatedResponse[T]:
    return PaginatedResponse(
        leaves=items,
        total_count=total,
        current_page=page,
        total_pages=total_pages(total, limit),
        limit=limit,
    )
