"""Leave ORM models: Leave."""

from __future__ import annotations

from datetime import date, datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_management.common.constants import LeaveStatus, LeaveType, enum_values
from leave_management.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Leave(Base):
    __tablename__ = "leaves"
    __table_args__ = (
        sa.CheckConstraint("to_date >= from_date", name="ck_leaves_date_range"),
        sa.Index("ix_leaves_user_id", "user_id"),
        sa.Index("ix_leaves_status", "status"),
        sa.Index("ix_leaves_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("users.id"), nullable=False
    )
    # Denormalized display name, entered by the employee on the form
    employee_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    leave_type: Mapped[LeaveType] = mapped_column(
        sa.Enum(LeaveType, name="leave_type", values_callable=enum_values),
        nullable=False,
    )
    from_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    to_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    reason: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status", values_callable=enum_values),
        nullable=False,
        default=LeaveStatus.pending,
        server_default=LeaveStatus.pending.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=_utcnow,
        server_default=sa.func.now(),
        onupdate=_utcnow,
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="leaves")

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.pending

    def __repr__(self) -> str:
        return f"<Leave {self.id} user={self.user_id} {self.leave_type.value} {self.status.value}>"
