"""Common module — shared utilities for the leave management service."""

from leave_management.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    STATUS_FILTER_ALL,
    LeaveStatus,
    LeaveType,
    UserRole,
)
from leave_management.common.exceptions import (
    AppException,
    AuthenticationException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from leave_management.common.pagination import (
    PaginatedResponse,
    PaginationParams,
    build_page,
    clamp_limit,
    clamp_page,
)

__all__ = [
    # Constants / Enums
    "LeaveStatus",
    "LeaveType",
    "UserRole",
    "STATUS_FILTER_ALL",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MIN_PAGE_SIZE",
    # Exceptions
    "AppException",
    "AuthenticationException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationParams",
    "build_page",
    "clamp_limit",
    "clamp_page",
]
