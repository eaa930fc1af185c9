from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    ForeignKey,
    DECIMAL,
    UniqueConstraint,
)
from admin_analytics.core.database import Base
from admin_analytics.models.base import utcnow


class AdminPerformanceMetric(Base):
    """Per admin, per day rollup. Written by the external aggregation job."""

    __tablename__ = "admin_performance_metrics"
    __table_args__ = (UniqueConstraint("admin_id", "date", name="uq_performance_admin_date"),)

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    total_login_time = Column(Integer, default=0)  # seconds
    total_activities = Column(Integer, default=0)
    total_page_views = Column(Integer, default=0)
    avg_session_duration = Column(DECIMAL(10, 2), nullable=True)
    success_rate = Column(DECIMAL(5, 2), nullable=True)
    error_count = Column(Integer, default=0)

    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class FeatureUsage(Base):
    """Running usage counters per admin and feature, fed by FEATURE_USAGE activities."""

    __tablename__ = "feature_usage_tracking"
    __table_args__ = (
        UniqueConstraint("admin_id", "feature_name", "feature_category", name="uq_feature_usage_admin_feature"),
    )

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=False, index=True)
    feature_name = Column(String(100), nullable=False, index=True)
    feature_category = Column(String(50), nullable=False)

    usage_count = Column(Integer, default=0)
    total_time_spent = Column(Integer, default=0)  # milliseconds
    success_count = Column(Integer, default=0)
    error_count = Column(Integer, default=0)

    first_used_at = Column(DateTime, default=utcnow)
    last_used_at = Column(DateTime, default=utcnow, index=True)


class SystemUsageStat(Base):
    __tablename__ = "system_usage_stats"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, unique=True, index=True)

    total_admin_logins = Column(Integer, default=0)
    total_activities = Column(Integer, default=0)
    total_page_views = Column(Integer, default=0)
    avg_response_time_ms = Column(DECIMAL(10, 2), nullable=True)
    error_rate = Column(DECIMAL(5, 2), nullable=True)
