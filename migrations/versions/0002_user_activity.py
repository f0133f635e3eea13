"""user activity log

Revision ID: 0002_user_activity
Revises: 0001_init
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0002_user_activity"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_activity",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "user_id", "date", "action_type", name="uq_user_activity_user_date_action"
        ),
    )
    op.create_index("ix_user_activity_user_id", "user_activity", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_activity_user_id", table_name="user_activity")
    op.drop_table("user_activity")
