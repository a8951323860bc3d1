"""create_pay_items

Revision ID: 3f9a1c2d4e5b
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "3f9a1c2d4e5b"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # ── businesses ─────────────────────────────────────────────────────────────
    op.create_table(
        "businesses",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column("deduction_percentage", sa.Float, nullable=True),
        sa.Column("enabled", sa.Boolean, server_default=sa.true(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_businesses_external_id", "businesses", ["external_id"], unique=True)

    # ── users ──────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("external_id", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_external_id", "users", ["external_id"])

    # ── user_businesses ────────────────────────────────────────────────────────
    op.create_table(
        "user_businesses",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("business_id", sa.Integer, sa.ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("business_id", "user_id"),
    )
    op.create_index("ix_user_businesses_business_id", "user_businesses", ["business_id"])
    op.create_index("ix_user_businesses_user_id", "user_businesses", ["user_id"])

    # ── pay_items ──────────────────────────────────────────────────────────────
    op.create_table(
        "pay_items",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("pay_rate", sa.Numeric(12, 4), nullable=False),
        sa.Column("hours", sa.Numeric(12, 4), nullable=False),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column("pay_date", sa.Date, server_default=sa.func.current_date(), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("business_id", sa.Integer, sa.ForeignKey("businesses.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "external_id", "business_id", "user_id", name="uq_pay_items_external_business_user"
        ),
    )
    op.create_index("ix_pay_items_user_id", "pay_items", ["user_id"])
    op.create_index("ix_pay_items_business_id", "pay_items", ["business_id"])


def downgrade() -> None:
    op.drop_table("pay_items")
    op.drop_table("user_businesses")
    op.drop_table("users")
    op.drop_table("businesses")
