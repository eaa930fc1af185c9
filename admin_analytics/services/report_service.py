"""Canned aggregate reports over the tracking tables.

Each report type runs a handful of independent aggregate queries over a
closed date range and assembles them into a fixed-shape dict of JSON-ready
values. Derived fields (success rates, error rates) are computed in Python
after the rows are fetched.
"""
from datetime import date, timedelta
from typing import Callable, Optional
import logging

from sqlalchemy import case, distinct, func
from sqlalchemy.orm import Session

from admin_analytics.core.constants import (
    DEFAULT_DATE_RANGE,
    RECENT_SECURITY_EVENTS_LIMIT,
    DateRange,
    ReportType,
    Severity,
)
from admin_analytics.models.admin import Admin
from admin_analytics.models.analytics import AdminPerformanceMetric, FeatureUsage, SystemUsageStat
from admin_analytics.models.audit import AdminActivityLog, AdminPageVisit
from admin_analytics.models.base import utcnow
from admin_analytics.models.security import AdminSecurityEvent
from admin_analytics.models.session import AdminSession
from admin_analytics.services.analytics_service import AnalyticsService
from admin_analytics.utils.errors import InvalidReportType
from admin_analytics.utils.helpers import (
    day_window,
    percentage,
    row_to_dict,
    rows_to_dicts,
    success_rate,
    to_plain,
)

logger = logging.getLogger(__name__)

_RANGE_DAYS = {
    DateRange.ONE_DAY: 1,
    DateRange.SEVEN_DAYS: 7,
    DateRange.THIRTY_DAYS: 30,
    DateRange.NINETY_DAYS: 90,
}


def normalize_range(code: Optional[str]) -> DateRange:
    """Map a range code onto a DateRange, falling back to 7 days."""
    try:
        return DateRange(code)
    except ValueError:
        return DEFAULT_DATE_RANGE


def parse_range(code: Optional[str], today: Optional[date] = None) -> tuple[date, date]:
    """Return ``(start, end)`` for a range code; ``end`` is today."""
    end = today or utcnow().date()
    range_code = normalize_range(code)
    if range_code is DateRange.ONE_YEAR:
        try:
            start = end.replace(year=end.year - 1)
        except ValueError:
            # Feb 29 has no counterpart in the previous year
            start = end.replace(year=end.year - 1, day=28)
        return start, end
    return end - timedelta(days=_RANGE_DAYS[range_code]), end


def _scalar(db: Session, expression, created_column, lower, upper, *extra):
    return db.query(expression).filter(created_column >= lower, created_column < upper, *extra).scalar()


class ReportService:
    @staticmethod
    def generate(db: Session, report_type: str, start: date, end: date) -> dict:
        try:
            report_type = ReportType(report_type)
        except ValueError:
            raise InvalidReportType(f"Invalid report type: {report_type}")

        generator: Callable[[Session, date, date], dict] = _GENERATORS[report_type]
        logger.debug(f"Generating {report_type.value} report for {start.isoformat()}..{end.isoformat()}")
        return generator(db, start, end)

    @staticmethod
    def overview(db: Session, start: date, end: date) -> dict:
        lower, upper = day_window(start, end)

        activity_count = func.count(AdminActivityLog.id).label("activity_count")
        most_active = (
            db.query(Admin.username, activity_count)
            .join(Admin, AdminActivityLog.admin_id == Admin.id)
            .filter(AdminActivityLog.created_at >= lower, AdminActivityLog.created_at < upper)
            .group_by(AdminActivityLog.admin_id, Admin.username)
            .order_by(activity_count.desc(), Admin.username)
            .first()
        )

        total_usage = func.sum(FeatureUsage.usage_count).label("total_usage")
        most_used = (
            db.query(FeatureUsage.feature_name, total_usage)
            .filter(FeatureUsage.last_used_at >= lower, FeatureUsage.last_used_at < upper)
            .group_by(FeatureUsage.feature_name)
            .order_by(total_usage.desc(), FeatureUsage.feature_name)
            .first()
        )

        avg_duration = _scalar(
            db, func.avg(AdminSession.session_duration), AdminSession.login_time, lower, upper,
            AdminSession.session_duration > 0,
        )

        return {
            "total_sessions": _scalar(db, func.count(AdminSession.id), AdminSession.login_time, lower, upper) or 0,
            "unique_admins": _scalar(
                db, func.count(distinct(AdminSession.admin_id)), AdminSession.login_time, lower, upper
            ) or 0,
            "total_activities": _scalar(
                db, func.count(AdminActivityLog.id), AdminActivityLog.created_at, lower, upper
            ) or 0,
            "total_page_views": _scalar(
                db, func.count(AdminPageVisit.id), AdminPageVisit.created_at, lower, upper
            ) or 0,
            "security_events": _scalar(
                db, func.count(AdminSecurityEvent.id), AdminSecurityEvent.created_at, lower, upper
            ) or 0,
            "avg_session_duration": to_plain(avg_duration) or 0,
            "most_active_admin": row_to_dict(most_active),
            "most_used_feature": row_to_dict(most_used),
        }

    @staticmethod
    def admin_activity(db: Session, start: date, end: date) -> dict:
        lower, upper = day_window(start, end)
        in_range = (AdminActivityLog.created_at >= lower, AdminActivityLog.created_at < upper)
        day = func.date(AdminActivityLog.created_at)

        daily_trends = (
            db.query(
                day.label("date"),
                func.count(AdminActivityLog.id).label("total_activities"),
                func.count(distinct(AdminActivityLog.admin_id)).label("unique_admins"),
                func.count(distinct(AdminActivityLog.activity_type)).label("unique_activity_types"),
                func.avg(AdminActivityLog.execution_time_ms).label("avg_execution_time"),
            )
            .filter(*in_range)
            .group_by(day)
            .order_by(day.asc())
            .all()
        )

        count = func.count(AdminActivityLog.id).label("count")
        breakdown = (
            db.query(
                AdminActivityLog.activity_type,
                AdminActivityLog.activity_category,
                count,
                func.avg(AdminActivityLog.execution_time_ms).label("avg_execution_time"),
            )
            .filter(*in_range)
            .group_by(AdminActivityLog.activity_type, AdminActivityLog.activity_category)
            .order_by(count.desc(), AdminActivityLog.activity_type, AdminActivityLog.activity_category)
            .all()
        )

        total = func.count(AdminActivityLog.id).label("total_activities")
        status = AdminActivityLog.response_status
        summary_rows = (
            db.query(
                Admin.username,
                Admin.display_name,
                total,
                func.count(distinct(day)).label("active_days"),
                func.avg(AdminActivityLog.execution_time_ms).label("avg_execution_time"),
                func.count(case(((status >= 200) & (status < 300), 1))).label("success_count"),
                func.count(case((status >= 400, 1))).label("error_count"),
            )
            .join(Admin, AdminActivityLog.admin_id == Admin.id)
            .filter(*in_range)
            .group_by(AdminActivityLog.admin_id, Admin.username, Admin.display_name)
            .order_by(total.desc(), Admin.username)
            .all()
        )
        admin_summary = []
        for row in rows_to_dicts(summary_rows):
            row["success_rate"] = success_rate(row["success_count"], row["total_activities"])
            admin_summary.append(row)

        return {
            "daily_trends": rows_to_dicts(daily_trends),
            "activity_breakdown": rows_to_dicts(breakdown),
            "admin_summary": admin_summary,
        }

    @staticmethod
    def security(db: Session, start: date, end: date) -> dict:
        lower, upper = day_window(start, end)
        in_range = (AdminSecurityEvent.created_at >= lower, AdminSecurityEvent.created_at < upper)

        recent = (
            db.query(
                AdminSecurityEvent.id,
                AdminSecurityEvent.event_type,
                AdminSecurityEvent.event_severity,
                AdminSecurityEvent.event_description,
                AdminSecurityEvent.ip_address,
                AdminSecurityEvent.is_resolved,
                AdminSecurityEvent.created_at,
                AdminSecurityEvent.resolved_at,
            )
            .filter(*in_range)
            .order_by(AdminSecurityEvent.created_at.desc(), AdminSecurityEvent.id.desc())
            .limit(RECENT_SECURITY_EVENTS_LIMIT)
            .all()
        )

        day = func.date(AdminSecurityEvent.created_at)
        severity = AdminSecurityEvent.event_severity
        trends = (
            db.query(
                day.label("date"),
                func.count(AdminSecurityEvent.id).label("total_events"),
                func.count(case((severity == Severity.CRITICAL.value, 1))).label("critical_events"),
                func.count(case((severity == Severity.HIGH.value, 1))).label("high_events"),
                func.count(case((AdminSecurityEvent.is_resolved == True, 1))).label("resolved_events"),  # noqa: E712
            )
            .filter(*in_range)
            .group_by(day)
            .order_by(day.asc())
            .all()
        )

        return {
            "security_events": AnalyticsService.security_breakdown(db, lower, upper),
            "recent_events": rows_to_dicts(recent),
            "security_trends": rows_to_dicts(trends),
        }

    @staticmethod
    def performance(db: Session, start: date, end: date) -> dict:
        avg_activities = func.avg(AdminPerformanceMetric.total_activities).label("avg_activities")
        performance = (
            db.query(
                Admin.username,
                Admin.display_name,
                avg_activities,
                func.avg(AdminPerformanceMetric.total_login_time).label("avg_login_time"),
                func.avg(AdminPerformanceMetric.avg_session_duration).label("avg_session_duration"),
                func.avg(AdminPerformanceMetric.success_rate).label("avg_success_rate"),
                func.avg(AdminPerformanceMetric.error_count).label("avg_error_count"),
                func.count(distinct(AdminPerformanceMetric.date)).label("active_days"),
            )
            .join(Admin, AdminPerformanceMetric.admin_id == Admin.id)
            .filter(AdminPerformanceMetric.date >= start, AdminPerformanceMetric.date <= end)
            .group_by(AdminPerformanceMetric.admin_id, Admin.username, Admin.display_name)
            .order_by(avg_activities.desc(), Admin.username)
            .all()
        )

        system_trends = (
            db.query(
                SystemUsageStat.date,
                SystemUsageStat.total_admin_logins,
                SystemUsageStat.total_activities,
                SystemUsageStat.total_page_views,
                SystemUsageStat.avg_response_time_ms,
                SystemUsageStat.error_rate,
            )
            .filter(SystemUsageStat.date >= start, SystemUsageStat.date <= end)
            .order_by(SystemUsageStat.date.asc())
            .all()
        )

        return {
            "admin_performance": rows_to_dicts(performance),
            "system_trends": rows_to_dicts(system_trends),
        }

    @staticmethod
    def feature_usage(db: Session, start: date, end: date) -> dict:
        lower, upper = day_window(start, end)
        in_range = (FeatureUsage.last_used_at >= lower, FeatureUsage.last_used_at < upper)

        total_usage = func.sum(FeatureUsage.usage_count).label("total_usage")
        usage_rows = (
            db.query(
                FeatureUsage.feature_name,
                FeatureUsage.feature_category,
                func.count(distinct(FeatureUsage.admin_id)).label("unique_users"),
                total_usage,
                func.avg(FeatureUsage.usage_count).label("avg_usage_per_user"),
                func.sum(FeatureUsage.total_time_spent).label("total_time_spent"),
                func.sum(FeatureUsage.success_count).label("total_successes"),
                func.sum(FeatureUsage.error_count).label("total_errors"),
            )
            .filter(*in_range)
            .group_by(FeatureUsage.feature_name, FeatureUsage.feature_category)
            .order_by(total_usage.desc(), FeatureUsage.feature_name, FeatureUsage.feature_category)
            .all()
        )
        feature_usage = []
        for row in rows_to_dicts(usage_rows):
            attempts = (row["total_successes"] or 0) + (row["total_errors"] or 0)
            row["success_rate"] = success_rate(row["total_successes"], attempts)
            feature_usage.append(row)

        day = func.date(FeatureUsage.last_used_at)
        daily_usage = func.sum(FeatureUsage.usage_count).label("daily_usage")
        trends = (
            db.query(day.label("date"), FeatureUsage.feature_name, daily_usage)
            .filter(*in_range)
            .group_by(day, FeatureUsage.feature_name)
            .order_by(day.asc(), daily_usage.desc(), FeatureUsage.feature_name)
            .all()
        )

        return {
            "feature_usage": feature_usage,
            "feature_trends": rows_to_dicts(trends),
        }

    @staticmethod
    def system_health(db: Session, start: date, end: date) -> dict:
        lower, upper = day_window(start, end)
        in_range = (AdminActivityLog.created_at >= lower, AdminActivityLog.created_at < upper)

        totals = (
            db.query(
                func.avg(AdminActivityLog.execution_time_ms).label("avg_time"),
                func.count(AdminActivityLog.id).label("total"),
                func.count(case((AdminActivityLog.response_status >= 400, 1))).label("errors"),
                func.count(distinct(func.date(AdminActivityLog.created_at))).label("uptime_days"),
            )
            .filter(*in_range)
            .one()
        )

        login_day = func.date(AdminSession.login_time)
        per_day = (
            db.query(func.count(AdminSession.id).label("concurrent_users"))
            .filter(AdminSession.login_time >= lower, AdminSession.login_time < upper)
            .group_by(login_day)
            .subquery()
        )
        peak = db.query(func.max(per_day.c.concurrent_users)).scalar()

        return {
            "avg_response_time": to_plain(totals.avg_time) or 0,
            "error_rate": percentage(totals.errors, totals.total),
            "peak_concurrent_users": peak or 0,
            "total_uptime": totals.uptime_days or 0,
        }


_GENERATORS = {
    ReportType.OVERVIEW: ReportService.overview,
    ReportType.ADMIN_ACTIVITY: ReportService.admin_activity,
    ReportType.SECURITY: ReportService.security,
    ReportType.PERFORMANCE: ReportService.performance,
    ReportType.FEATURE_USAGE: ReportService.feature_usage,
    ReportType.SYSTEM_HEALTH: ReportService.system_health,
}
