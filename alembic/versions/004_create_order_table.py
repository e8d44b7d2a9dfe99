"""Create customer_order table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "004"
down_revision: str | None = "003"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "customer_order",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("email", sa.String(length=256), nullable=True),
        sa.Column("stripe_customer_id", sa.String(length=256), nullable=True),
        sa.Column("stripe_session_id", sa.String(length=256), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=8), nullable=False, server_default="usd"),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="paid"),
        sa.Column("plan_id", sa.String(length=64), nullable=True),
        sa.Column("item_summary", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stripe_session_id"),
    )
    op.create_index(op.f("ix_customer_order_user_id"), "customer_order", ["user_id"], unique=False)
    op.create_index(op.f("ix_customer_order_email"), "customer_order", ["email"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_customer_order_email"), table_name="customer_order")
    op.drop_index(op.f("ix_customer_order_user_id"), table_name="customer_order")
    op.drop_table("customer_order")
