"""Create admin tracking tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(150), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_admins_id", "admins", ["id"])
    op.create_index("ix_admins_username", "admins", ["username"], unique=True)

    op.create_table(
        "admin_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("session_token_hash", sa.String(128), nullable=False),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("login_time", sa.DateTime(), nullable=False),
        sa.Column("last_activity_at", sa.DateTime(), nullable=True),
        sa.Column("logout_time", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("session_duration", sa.Integer(), nullable=True),
    )
    op.create_index("ix_admin_sessions_id", "admin_sessions", ["id"])
    op.create_index("ix_admin_sessions_admin_id", "admin_sessions", ["admin_id"])
    op.create_index("ix_admin_sessions_session_token_hash", "admin_sessions", ["session_token_hash"], unique=True)
    op.create_index("ix_admin_sessions_login_time", "admin_sessions", ["login_time"])
    op.create_index("ix_admin_sessions_is_active", "admin_sessions", ["is_active"])

    op.create_table(
        "admin_activity_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("admin_sessions.id"), nullable=True),
        sa.Column("activity_type", sa.String(50), nullable=False),
        sa.Column("activity_category", sa.String(50), nullable=False),
        sa.Column("activity_description", sa.Text(), nullable=False),
        sa.Column("target_resource", sa.String(100), nullable=True),
        sa.Column("target_id", sa.String(100), nullable=True),
        sa.Column("old_values", JSONType, nullable=True),
        sa.Column("new_values", JSONType, nullable=True),
        sa.Column("additional_data", JSONType, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("request_method", sa.String(10), nullable=True),
        sa.Column("request_url", sa.String(2048), nullable=True),
        sa.Column("response_status", sa.Integer(), nullable=True),
        sa.Column("execution_time_ms", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_admin_activity_log_id", "admin_activity_log", ["id"])
    op.create_index("ix_admin_activity_log_admin_id", "admin_activity_log", ["admin_id"])
    op.create_index("ix_admin_activity_log_session_id", "admin_activity_log", ["session_id"])
    op.create_index("ix_admin_activity_log_activity_type", "admin_activity_log", ["activity_type"])
    op.create_index("ix_admin_activity_log_created_at", "admin_activity_log", ["created_at"])

    op.create_table(
        "admin_page_visits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("admin_sessions.id"), nullable=True),
        sa.Column("page_name", sa.String(255), nullable=False),
        sa.Column("page_url", sa.String(2048), nullable=False),
        sa.Column("visit_duration", sa.Integer(), nullable=True),
        sa.Column("referrer_url", sa.String(2048), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("screen_resolution", sa.String(20), nullable=True),
        sa.Column("browser_name", sa.String(50), nullable=True),
        sa.Column("browser_version", sa.String(20), nullable=True),
        sa.Column("os_name", sa.String(50), nullable=True),
        sa.Column("device_type", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_admin_page_visits_id", "admin_page_visits", ["id"])
    op.create_index("ix_admin_page_visits_admin_id", "admin_page_visits", ["admin_id"])
    op.create_index("ix_admin_page_visits_created_at", "admin_page_visits", ["created_at"])

    op.create_table(
        "admin_security_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=True),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("event_severity", sa.String(10), nullable=False),
        sa.Column("event_description", sa.Text(), nullable=False),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("additional_data", JSONType, nullable=True),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("resolved_by", sa.Integer(), sa.ForeignKey("admins.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_admin_security_events_id", "admin_security_events", ["id"])
    op.create_index("ix_admin_security_events_admin_id", "admin_security_events", ["admin_id"])
    op.create_index("ix_admin_security_events_event_type", "admin_security_events", ["event_type"])
    op.create_index("ix_admin_security_events_event_severity", "admin_security_events", ["event_severity"])
    op.create_index("ix_admin_security_events_is_resolved", "admin_security_events", ["is_resolved"])
    op.create_index("ix_admin_security_events_created_at", "admin_security_events", ["created_at"])

    op.create_table(
        "admin_performance_metrics",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_login_time", sa.Integer(), nullable=True),
        sa.Column("total_activities", sa.Integer(), nullable=True),
        sa.Column("total_page_views", sa.Integer(), nullable=True),
        sa.Column("avg_session_duration", sa.DECIMAL(10, 2), nullable=True),
        sa.Column("success_rate", sa.DECIMAL(5, 2), nullable=True),
        sa.Column("error_count", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("admin_id", "date", name="uq_performance_admin_date"),
    )
    op.create_index("ix_admin_performance_metrics_id", "admin_performance_metrics", ["id"])
    op.create_index("ix_admin_performance_metrics_admin_id", "admin_performance_metrics", ["admin_id"])
    op.create_index("ix_admin_performance_metrics_date", "admin_performance_metrics", ["date"])

    op.create_table(
        "feature_usage_tracking",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("feature_name", sa.String(100), nullable=False),
        sa.Column("feature_category", sa.String(50), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=True),
        sa.Column("total_time_spent", sa.Integer(), nullable=True),
        sa.Column("success_count", sa.Integer(), nullable=True),
        sa.Column("error_count", sa.Integer(), nullable=True),
        sa.Column("first_used_at", sa.DateTime(), nullable=True),
        sa.Column("last_used_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("admin_id", "feature_name", "feature_category", name="uq_feature_usage_admin_feature"),
    )
    op.create_index("ix_feature_usage_tracking_id", "feature_usage_tracking", ["id"])
    op.create_index("ix_feature_usage_tracking_admin_id", "feature_usage_tracking", ["admin_id"])
    op.create_index("ix_feature_usage_tracking_feature_name", "feature_usage_tracking", ["feature_name"])
    op.create_index("ix_feature_usage_tracking_last_used_at", "feature_usage_tracking", ["last_used_at"])

    op.create_table(
        "system_usage_stats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_admin_logins", sa.Integer(), nullable=True),
        sa.Column("total_activities", sa.Integer(), nullable=True),
        sa.Column("total_page_views", sa.Integer(), nullable=True),
        sa.Column("avg_response_time_ms", sa.DECIMAL(10, 2), nullable=True),
        sa.Column("error_rate", sa.DECIMAL(5, 2), nullable=True),
    )
    op.create_index("ix_system_usage_stats_id", "system_usage_stats", ["id"])
    op.create_index("ix_system_usage_stats_date", "system_usage_stats", ["date"], unique=True)


def downgrade() -> None:
    op.drop_table("system_usage_stats")
    op.drop_table("feature_usage_tracking")
    op.drop_table("admin_performance_metrics")
    op.drop_table("admin_security_events")
    op.drop_table("admin_page_visits")
    op.drop_table("admin_activity_log")
    op.drop_table("admin_sessions")
    op.drop_table("admins")
