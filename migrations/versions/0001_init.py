"""initial schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*names: str) -> list[sa.Column]:
    return [
        sa.Column(name, sa.DateTime(timezone=True), nullable=False) for name in names
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column(
            "subscription_tier",
            sa.String(length=20),
            nullable=False,
            server_default="free",
        ),
        sa.Column("relationship_status", sa.String(length=20), nullable=True),
        *_timestamps("created_at", "updated_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "promo_codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("plan_type", sa.String(length=20), nullable=False, server_default="pro"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("current_uses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps("created_at"),
        sa.UniqueConstraint("code", name="uq_promo_codes_code"),
        sa.CheckConstraint(
            "max_uses IS NULL OR current_uses <= max_uses",
            name="ck_promo_codes_uses_within_cap",
        ),
    )

    op.create_table(
        "promo_redemptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "promo_code_id",
            sa.Integer(),
            sa.ForeignKey("promo_codes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("plan_type", sa.String(length=20), nullable=False),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "user_id", "promo_code_id", name="uq_promo_redemptions_user_code"
        ),
    )
    op.create_index(
        "ix_promo_redemptions_user_id", "promo_redemptions", ["user_id"]
    )
    op.create_index(
        "ix_promo_redemptions_promo_code_id", "promo_redemptions", ["promo_code_id"]
    )

    op.create_table(
        "coach_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("message_title", sa.String(length=255), nullable=False),
        sa.Column("message_body", sa.Text(), nullable=False),
        sa.Column("call_to_action", sa.Text(), nullable=True),
        sa.Column("user_context", postgresql.JSONB(), nullable=True),
        sa.Column(
            "session_type", sa.String(length=20), nullable=False, server_default="manual"
        ),
        *_timestamps("created_at"),
    )
    op.create_index("ix_coach_sessions_user_id", "coach_sessions", ["user_id"])

    op.create_table(
        "notification_preferences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("reminder_type", sa.String(length=50), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("time_preference", sa.String(length=5), nullable=True),
        sa.Column("push_token", sa.String(length=255), nullable=True),
        *_timestamps("created_at", "updated_at"),
        sa.UniqueConstraint(
            "user_id", "reminder_type", name="uq_notification_prefs_user_type"
        ),
    )
    op.create_index(
        "ix_notification_preferences_user_id", "notification_preferences", ["user_id"]
    )

    op.create_table(
        "user_streaks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("streak_type", sa.String(length=20), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        *_timestamps("updated_at"),
        sa.UniqueConstraint("user_id", "streak_type", name="uq_user_streaks_user_type"),
    )
    op.create_index("ix_user_streaks_user_id", "user_streaks", ["user_id"])

    op.create_table(
        "stripe_subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("stripe_customer_id", sa.String(length=255), nullable=False),
        sa.Column("stripe_subscription_id", sa.String(length=255), nullable=True),
        sa.Column("stripe_price_id", sa.String(length=255), nullable=True),
        sa.Column("plan_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="pending"),
        sa.Column("current_period_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        *_timestamps("created_at", "updated_at"),
        sa.UniqueConstraint("stripe_customer_id", name="uq_stripe_subscriptions_customer"),
        sa.UniqueConstraint(
            "stripe_subscription_id", name="uq_stripe_subscriptions_subscription"
        ),
    )
    op.create_index(
        "ix_stripe_subscriptions_user_id", "stripe_subscriptions", ["user_id"]
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        *_timestamps("created_at"),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("stripe_subscriptions")
    op.drop_table("user_streaks")
    op.drop_table("notification_preferences")
    op.drop_table("coach_sessions")
    op.drop_table("promo_redemptions")
    op.drop_table("promo_codes")
    op.drop_table("users")
