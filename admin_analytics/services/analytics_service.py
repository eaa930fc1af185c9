"""Read-side queries behind the tracking API's analytics and list endpoints."""
from datetime import date, timedelta
from typing import Any, Optional
import logging

from sqlalchemy import case, distinct, func
from sqlalchemy.orm import Session

from admin_analytics.core.constants import AnalyticsKind
from admin_analytics.models.admin import Admin
from admin_analytics.models.analytics import AdminPerformanceMetric
from admin_analytics.models.audit import AdminActivityLog, AdminPageVisit
from admin_analytics.models.base import utcnow
from admin_analytics.models.security import AdminSecurityEvent
from admin_analytics.models.session import AdminSession
from admin_analytics.services.filters import FilterName, build_predicates, clamp_limit
from admin_analytics.utils.errors import NotFoundError, ValidationError
from admin_analytics.utils.helpers import day_window, model_to_dict, rows_to_dicts, to_plain

logger = logging.getLogger(__name__)

DEFAULT_DAILY_DAYS = 7
MAX_DAILY_DAYS = 3650


def _count(db: Session, column, created_column, day: date, *extra) -> int:
    lower, upper = day_window(day, day)
    return (
        db.query(func.count(column))
        .filter(created_column >= lower, created_column < upper, *extra)
        .scalar()
        or 0
    )


class AnalyticsService:
    @staticmethod
    def query_analytics(
        db: Session,
        kind: str,
        day: Optional[date] = None,
        admin_id: Optional[Any] = None,
        days: Optional[int] = None,
    ) -> dict:
        """Dispatch one analytics query; the result is keyed the way the API responds."""
        day = day or utcnow().date()
        try:
            kind = AnalyticsKind(kind)
        except ValueError:
            raise ValidationError("Invalid analytics type")

        if kind is AnalyticsKind.SUMMARY:
            return {"analytics": AnalyticsService.summary(db, day), "date": day.isoformat()}
        if kind is AnalyticsKind.DAILY:
            return {"daily_analytics": AnalyticsService.daily(db, day, days)}
        if kind is AnalyticsKind.ADMIN:
            return {"admin_analytics": AnalyticsService.admin(db, admin_id, day)}
        if kind is AnalyticsKind.SECURITY:
            return {"security_analytics": AnalyticsService.security(db, day)}
        return {"performance_analytics": AnalyticsService.performance(db, day)}

    @staticmethod
    def summary(db: Session, day: date) -> dict:
        return {
            "total_sessions": _count(db, AdminSession.id, AdminSession.login_time, day),
            "active_sessions": _count(
                db, AdminSession.id, AdminSession.login_time, day,
                AdminSession.is_active == True,  # noqa: E712
            ),
            "total_activities": _count(db, AdminActivityLog.id, AdminActivityLog.created_at, day),
            "total_page_views": _count(db, AdminPageVisit.id, AdminPageVisit.created_at, day),
            "security_events": _count(db, AdminSecurityEvent.id, AdminSecurityEvent.created_at, day),
            "unique_admins": _count(db, distinct(AdminActivityLog.admin_id), AdminActivityLog.created_at, day),
        }

    @staticmethod
    def daily(db: Session, day: date, days: Optional[int] = None) -> list[dict]:
        if days is None:
            days = DEFAULT_DAILY_DAYS
        try:
            days = int(days)
        except (TypeError, ValueError):
            raise ValidationError("days must be an integer")
        if days < 0:
            raise ValidationError("days must be zero or positive")
        if days > MAX_DAILY_DAYS:
            raise ValidationError(f"days must not exceed {MAX_DAILY_DAYS}")
        try:
            start = day - timedelta(days=days)
        except OverflowError:
            raise ValidationError("date range out of bounds")
        lower, upper = day_window(start, day)
        bucket = func.date(AdminActivityLog.created_at)
        rows = (
            db.query(
                bucket.label("date"),
                func.count(AdminActivityLog.id).label("total_activities"),
                func.count(distinct(AdminActivityLog.admin_id)).label("unique_admins"),
                func.count(distinct(AdminActivityLog.activity_type)).label("unique_activity_types"),
                func.avg(AdminActivityLog.execution_time_ms).label("avg_execution_time"),
            )
            .filter(AdminActivityLog.created_at >= lower, AdminActivityLog.created_at < upper)
            .group_by(bucket)
            .order_by(bucket.desc())
            .all()
        )
        return rows_to_dicts(rows)

    @staticmethod
    def admin(db: Session, admin_id: Optional[Any], day: date) -> dict:
        if admin_id in (None, ""):
            raise ValidationError("Admin ID required")
        try:
            admin_id = int(admin_id)
        except (TypeError, ValueError):
            raise ValidationError("Admin ID required")

        admin = db.query(Admin).filter(Admin.id == admin_id).first()
        if not admin:
            raise NotFoundError("Admin not found")

        lower, upper = day_window(day, day)
        sessions = (
            db.query(
                func.count(AdminSession.id).label("total_sessions"),
                func.avg(AdminSession.session_duration).label("avg_session_duration"),
                func.max(AdminSession.login_time).label("last_login"),
            )
            .filter(
                AdminSession.admin_id == admin_id,
                AdminSession.login_time >= lower,
                AdminSession.login_time < upper,
            )
            .one()
        )
        activities = (
            db.query(
                func.count(AdminActivityLog.id).label("total_activities"),
                func.count(distinct(AdminActivityLog.activity_type)).label("unique_activity_types"),
            )
            .filter(
                AdminActivityLog.admin_id == admin_id,
                AdminActivityLog.created_at >= lower,
                AdminActivityLog.created_at < upper,
            )
            .one()
        )
        return {
            "username": admin.username,
            "display_name": admin.display_name,
            "total_sessions": sessions.total_sessions or 0,
            "total_activities": activities.total_activities or 0,
            "avg_session_duration": to_plain(sessions.avg_session_duration),
            "unique_activity_types": activities.unique_activity_types or 0,
            "last_login": to_plain(sessions.last_login),
        }

    @staticmethod
    def security(db: Session, day: date) -> list[dict]:
        lower, upper = day_window(day, day)
        return AnalyticsService.security_breakdown(db, lower, upper)

    @staticmethod
    def security_breakdown(db: Session, lower, upper) -> list[dict]:
        event_count = func.count(AdminSecurityEvent.id).label("event_count")
        rows = (
            db.query(
                AdminSecurityEvent.event_type,
                AdminSecurityEvent.event_severity,
                event_count,
                func.count(case((AdminSecurityEvent.is_resolved == True, 1))).label("resolved_count"),  # noqa: E712
                func.count(case((AdminSecurityEvent.is_resolved == False, 1))).label("pending_count"),  # noqa: E712
            )
            .filter(AdminSecurityEvent.created_at >= lower, AdminSecurityEvent.created_at < upper)
            .group_by(AdminSecurityEvent.event_type, AdminSecurityEvent.event_severity)
            .order_by(event_count.desc(), AdminSecurityEvent.event_type, AdminSecurityEvent.event_severity)
            .all()
        )
        return rows_to_dicts(rows)

    @staticmethod
    def performance(db: Session, day: date) -> list[dict]:
        rows = (
            db.query(
                Admin.username,
                Admin.display_name,
                AdminPerformanceMetric.total_activities,
                AdminPerformanceMetric.total_login_time,
                AdminPerformanceMetric.avg_session_duration,
                AdminPerformanceMetric.success_rate,
                AdminPerformanceMetric.error_count,
            )
            .join(Admin, AdminPerformanceMetric.admin_id == Admin.id)
            .filter(AdminPerformanceMetric.date == day)
            .order_by(AdminPerformanceMetric.total_activities.desc(), Admin.username)
            .all()
        )
        return rows_to_dicts(rows)

    # List endpoints

    @staticmethod
    def list_sessions(
        db: Session,
        admin_id: Optional[Any] = None,
        active: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        predicates = build_predicates({
            FilterName.SESSION_ADMIN_ID: admin_id,
            FilterName.SESSION_ACTIVE: active,
        })
        rows = (
            db.query(
                AdminSession.id,
                AdminSession.admin_id,
                AdminSession.ip_address,
                AdminSession.login_time,
                AdminSession.logout_time,
                AdminSession.is_active,
                AdminSession.session_duration,
                Admin.username,
                Admin.display_name,
            )
            .join(Admin, AdminSession.admin_id == Admin.id)
            .filter(*predicates)
            .order_by(AdminSession.login_time.desc(), AdminSession.id.desc())
            .limit(clamp_limit(limit, 50))
            .all()
        )
        return rows_to_dicts(rows)

    @staticmethod
    def list_activities(
        db: Session,
        admin_id: Optional[Any] = None,
        activity_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        predicates = build_predicates({
            FilterName.ACTIVITY_ADMIN_ID: admin_id,
            FilterName.ACTIVITY_TYPE: activity_type,
        })
        rows = (
            db.query(
                AdminActivityLog.id,
                AdminActivityLog.admin_id,
                AdminActivityLog.activity_type,
                AdminActivityLog.activity_category,
                AdminActivityLog.activity_description,
                AdminActivityLog.target_resource,
                AdminActivityLog.target_id,
                AdminActivityLog.ip_address,
                AdminActivityLog.created_at,
                AdminActivityLog.execution_time_ms,
                Admin.username,
                Admin.display_name,
            )
            .join(Admin, AdminActivityLog.admin_id == Admin.id)
            .filter(*predicates)
            .order_by(AdminActivityLog.created_at.desc(), AdminActivityLog.id.desc())
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return rows_to_dicts(rows)

    @staticmethod
    def list_security_events(
        db: Session,
        severity: Optional[str] = None,
        resolved: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        predicates = build_predicates({
            FilterName.EVENT_SEVERITY: severity or None,
            FilterName.EVENT_RESOLVED: resolved,
        })
        rows = (
            db.query(
                AdminSecurityEvent.id,
                AdminSecurityEvent.admin_id,
                AdminSecurityEvent.event_type,
                AdminSecurityEvent.event_severity,
                AdminSecurityEvent.event_description,
                AdminSecurityEvent.ip_address,
                AdminSecurityEvent.is_resolved,
                AdminSecurityEvent.created_at,
                AdminSecurityEvent.resolved_at,
            )
            .filter(*predicates)
            .order_by(AdminSecurityEvent.created_at.desc(), AdminSecurityEvent.id.desc())
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return rows_to_dicts(rows)

    @staticmethod
    def list_performance(db: Session, day: Optional[date] = None, admin_id: Optional[Any] = None) -> list[dict]:
        predicates = build_predicates({
            FilterName.PERFORMANCE_DATE: day or utcnow().date(),
            FilterName.PERFORMANCE_ADMIN_ID: admin_id,
        })
        rows = (
            db.query(
                AdminPerformanceMetric.admin_id,
                Admin.username,
                Admin.display_name,
                AdminPerformanceMetric.date,
                AdminPerformanceMetric.total_login_time,
                AdminPerformanceMetric.total_activities,
                AdminPerformanceMetric.total_page_views,
                AdminPerformanceMetric.avg_session_duration,
                AdminPerformanceMetric.success_rate,
                AdminPerformanceMetric.error_count,
            )
            .join(Admin, AdminPerformanceMetric.admin_id == Admin.id)
            .filter(*predicates)
            .order_by(AdminPerformanceMetric.total_activities.desc(), Admin.username)
            .all()
        )
        return rows_to_dicts(rows)

    @staticmethod
    def security_event_dict(event: AdminSecurityEvent) -> dict:
        return model_to_dict(event, (
            "id", "admin_id", "event_type", "event_severity", "event_description",
            "ip_address", "is_resolved", "created_at", "resolved_at", "resolved_by",
        ))
