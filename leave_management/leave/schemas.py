"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update  → request bodies (write)
  - *Out               → response bodies (read)
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leave_management.common.constants import (
    REASON_MAX_LENGTH,
    REASON_MIN_LENGTH,
    LeaveStatus,
    LeaveType,
)

DATE_ORDER_MESSAGE = "To date must be on or after from date."


# ═════════════════════════════════════════════════════════════════════
# Leave — Create / Update
# ═════════════════════════════════════════════════════════════════════


class LeaveCreate(BaseModel):
    """Payload for applying for leave. The owner comes from the token."""

    employee_name: str = Field(..., min_length=1, max_length=100)
    leave_type: LeaveType
    from_date: date = Field(..., description="Leave start date (inclusive)")
    to_date: date = Field(..., description="Leave end date (inclusive)")
    reason: str = Field(
        ...,
        min_length=REASON_MIN_LENGTH,
        max_length=REASON_MAX_LENGTH,
        description="Reason for leave",
    )

    @model_validator(mode="after")
    def validate_dates(self) -> "LeaveCreate":
        if self.to_date < self.from_date:
            raise ValueError(DATE_ORDER_MESSAGE)
        return self


class LeaveUpdate(BaseModel):
    """Partial edit by the owner while the leave is still pending."""

    employee_name: Optional[str] = Field(None, min_length=1, max_length=100)
    leave_type: Optional[LeaveType] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    reason: Optional[str] = Field(
        None, min_length=REASON_MIN_LENGTH, max_length=REASON_MAX_LENGTH,
    )

    @model_validator(mode="after")
    def validate_changes(self) -> "LeaveUpdate":
        if not self.changes():
            raise ValueError("At least one field must be provided.")
        if self.from_date and self.to_date and self.to_date < self.from_date:
            raise ValueError(DATE_ORDER_MESSAGE)
        return self

    def changes(self) -> dict:
        """Fields the caller actually supplied, ignoring explicit nulls."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class LeaveStatusUpdate(BaseModel):
    """Payload for the generic admin status endpoint."""

    status: LeaveStatus


# ═════════════════════════════════════════════════════════════════════
# Leave — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveOut(BaseModel):
    """Full leave record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    employee_name: str
    leave_type: LeaveType
    from_date: date
    to_date: date
    reason: str
    status: LeaveStatus
    created_at: datetime
    updated_at: datetime


class LeaveStats(BaseModel):
    """Per-status counts shown on the admin panel badges."""

    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total: int = 0
