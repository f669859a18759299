"""Enums and constants for the leave management service — matching the database ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    admin = "admin"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    annual = "Annual"
    sick = "Sick"
    personal = "Personal"
    maternity = "Maternity"
    paternity = "Paternity"
    emergency = "Emergency"


class LeaveStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


# Sentinel accepted by the list endpoint's ``status`` query parameter
STATUS_FILTER_ALL = "all"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum *values* ("Pending") rather than member names ("pending")."""
    return [member.value for member in enum_cls]


# ── Misc constants ──────────────────────────────────────────────────

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
PASSWORD_MIN_LENGTH = 6
USERNAME_MIN_LENGTH = 3
