"""001 – Initial schema: users and leaves tables with their enum types.

Revision ID: 001_initial_schema
Revises:
Create Date: 2024-06-01 10:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("employee", "admin", name="user_role")
leave_type = sa.Enum(
    "Annual", "Sick", "Personal", "Maternity", "Paternity", "Emergency",
    name="leave_type",
)
leave_status = sa.Enum("Pending", "Approved", "Rejected", name="leave_status")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── 1. users ──────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="employee"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
    )

    # ── 2. leaves ─────────────────────────────────────────────────────────
    op.create_table(
        "leaves",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("employee_name", sa.String(100), nullable=False),
        sa.Column("leave_type", leave_type, nullable=False),
        sa.Column("from_date", sa.Date, nullable=False),
        sa.Column("to_date", sa.Date, nullable=False),
        sa.Column("reason", sa.String(500), nullable=False),
        sa.Column("status", leave_status, nullable=False, server_default="Pending"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(),
        ),
        sa.CheckConstraint("to_date >= from_date", name="ck_leaves_date_range"),
    )
    op.create_index("ix_leaves_user_id", "leaves", ["user_id"])
    op.create_index("ix_leaves_status", "leaves", ["status"])
    op.create_index("ix_leaves_created_at", "leaves", ["created_at"])


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    op.drop_index("ix_leaves_created_at", table_name="leaves")
    op.drop_index("ix_leaves_status", table_name="leaves")
    op.drop_index("ix_leaves_user_id", table_name="leaves")
    op.drop_table("leaves")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (leave_status, leave_type, user_role):
        enum_type.drop(bind, checkfirst=True)
