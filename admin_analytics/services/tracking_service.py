from datetime import timedelta
from typing import Any, Optional, Union
import logging

from sqlalchemy.orm import Session

from admin_analytics.core.config import settings
from admin_analytics.core.constants import ActivityCategory, ActivityType, Severity
from admin_analytics.core.security import generate_session_token, hash_token
from admin_analytics.models.admin import Admin
from admin_analytics.models.analytics import FeatureUsage
from admin_analytics.models.audit import AdminActivityLog, AdminPageVisit
from admin_analytics.models.base import utcnow
from admin_analytics.models.security import AdminSecurityEvent
from admin_analytics.models.session import AdminSession
from admin_analytics.utils.errors import AuthError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_EMPTY_CLIENT = {
    "ip_address": "unknown",
    "user_agent": "unknown",
    "request_method": None,
    "request_url": None,
}


def _required_id(value: Any, message: str) -> int:
    if value is None or value == "":
        raise ValidationError(message)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)


def _require(message: str, *values) -> None:
    if any(v is None or (isinstance(v, str) and not v.strip()) for v in values):
        raise ValidationError(message)


def _truthy(value: Any) -> bool:
    # JSON clients may send flags as strings
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off", "")
    return bool(value)


class TrackingService:
    @staticmethod
    def authenticate(db: Session, session_token: Optional[str], touch: bool = True) -> AdminSession:
        """Resolve an opaque session token to its active, non-idle session."""
        if not session_token:
            raise AuthError("Admin session token required")

        session = (
            db.query(AdminSession)
            .filter(
                AdminSession.session_token_hash == hash_token(session_token),
                AdminSession.is_active == True,  # noqa: E712
            )
            .first()
        )
        if not session:
            logger.warning("Rejected unknown or closed admin session token")
            raise AuthError("Invalid or expired session")

        now = utcnow()
        idle_limit = settings.ADMIN_SESSION_IDLE_MINUTES
        last_seen = session.last_activity_at or session.login_time
        if idle_limit and last_seen < now - timedelta(minutes=idle_limit):
            logger.info(f"Admin session {session.id} idle since {last_seen.isoformat()}")
            raise AuthError("Invalid or expired session")

        if touch:
            session.last_activity_at = now
        return session

    @staticmethod
    def _resolve_session(db: Session, session: Union[AdminSession, str, None]) -> AdminSession:
        if isinstance(session, AdminSession):
            return session
        return TrackingService.authenticate(db, session)

    @staticmethod
    def login(db: Session, admin_id: Any, client: Optional[dict] = None) -> dict:
        admin_id = _required_id(admin_id, "Admin ID required")
        admin = db.query(Admin).filter(Admin.id == admin_id).first()
        if not admin:
            raise NotFoundError("Admin not found")

        client = client or _EMPTY_CLIENT
        token = generate_session_token()
        now = utcnow()
        session = AdminSession(
            admin_id=admin.id,
            session_token_hash=hash_token(token),
            ip_address=client.get("ip_address"),
            user_agent=client.get("user_agent"),
            login_time=now,
            last_activity_at=now,
            is_active=True,
        )
        db.add(session)
        db.flush()

        db.add(
            AdminActivityLog(
                admin_id=admin.id,
                session_id=session.id,
                activity_type=ActivityType.LOGIN.value,
                activity_category=ActivityCategory.AUTHENTICATION.value,
                activity_description=f"Admin {admin.username} logged in",
                ip_address=client.get("ip_address"),
                user_agent=client.get("user_agent"),
                request_method=client.get("request_method"),
                request_url=client.get("request_url"),
            )
        )
        db.commit()
        logger.info(f"Admin {admin.id} logged in (session {session.id})")
        return {"session_id": session.id, "session_token": token}

    @staticmethod
    def logout(db: Session, session_id: Any, admin_id: Any, client: Optional[dict] = None) -> AdminSession:
        if session_id in (None, "") or admin_id in (None, ""):
            raise ValidationError("Session ID and Admin ID required")
        session_id = _required_id(session_id, "Session ID and Admin ID required")
        admin_id = _required_id(admin_id, "Session ID and Admin ID required")

        session = (
            db.query(AdminSession)
            .filter(AdminSession.id == session_id, AdminSession.admin_id == admin_id)
            .first()
        )
        if not session:
            raise NotFoundError("Session not found")

        if not session.is_active:
            return session

        client = client or _EMPTY_CLIENT
        session.close(utcnow())
        db.add(
            AdminActivityLog(
                admin_id=admin_id,
                session_id=session.id,
                activity_type=ActivityType.LOGOUT.value,
                activity_category=ActivityCategory.AUTHENTICATION.value,
                activity_description=f"Session closed after {session.session_duration}s",
                ip_address=client.get("ip_address"),
                user_agent=client.get("user_agent"),
                request_method=client.get("request_method"),
                request_url=client.get("request_url"),
            )
        )
        db.commit()
        db.refresh(session)
        logger.info(f"Admin {admin_id} logged out (session {session.id}, {session.session_duration}s)")
        return session

    @staticmethod
    def record_activity(
        db: Session,
        session_token: Union[AdminSession, str, None],
        activity_type: str,
        activity_category: str,
        description: str,
        target_resource: Optional[str] = None,
        target_id: Optional[Any] = None,
        old_values: Optional[Any] = None,
        new_values: Optional[Any] = None,
        additional_data: Optional[Any] = None,
        client: Optional[dict] = None,
        execution_time_ms: int = 0,
        response_status: int = 200,
    ) -> AdminActivityLog:
        session = TrackingService._resolve_session(db, session_token)
        _require("Activity type, category, and description required", activity_type, activity_category, description)

        client = client or _EMPTY_CLIENT
        activity = AdminActivityLog(
            admin_id=session.admin_id,
            session_id=session.id,
            activity_type=activity_type,
            activity_category=activity_category,
            activity_description=description,
            target_resource=target_resource,
            target_id=str(target_id) if target_id is not None else None,
            old_values=old_values or None,
            new_values=new_values or None,
            additional_data=additional_data or None,
            ip_address=client.get("ip_address"),
            user_agent=client.get("user_agent"),
            request_method=client.get("request_method"),
            request_url=client.get("request_url"),
            response_status=response_status,
            execution_time_ms=max(0, int(execution_time_ms)),
        )
        db.add(activity)

        if activity_type == ActivityType.FEATURE_USAGE.value:
            TrackingService._record_feature_usage(db, activity)

        db.commit()
        db.refresh(activity)
        return activity

    @staticmethod
    def _record_feature_usage(db: Session, activity: AdminActivityLog) -> FeatureUsage:
        feature_name = activity.target_resource or activity.activity_description
        extra = activity.additional_data if isinstance(activity.additional_data, dict) else {}
        succeeded = _truthy(extra.get("success", True))
        try:
            spent = max(0, int(extra.get("execution_time") or 0))
        except (TypeError, ValueError):
            spent = 0

        usage = (
            db.query(FeatureUsage)
            .filter(
                FeatureUsage.admin_id == activity.admin_id,
                FeatureUsage.feature_name == feature_name,
                FeatureUsage.feature_category == activity.activity_category,
            )
            .first()
        )
        now = utcnow()
        if not usage:
            usage = FeatureUsage(
                admin_id=activity.admin_id,
                feature_name=feature_name,
                feature_category=activity.activity_category,
                usage_count=0,
                total_time_spent=0,
                success_count=0,
                error_count=0,
                first_used_at=now,
            )
            db.add(usage)

        usage.usage_count += 1
        usage.total_time_spent += spent
        if succeeded:
            usage.success_count += 1
        else:
            usage.error_count += 1
        usage.last_used_at = now
        return usage

    @staticmethod
    def record_page_visit(
        db: Session,
        session_token: Union[AdminSession, str, None],
        page_name: str,
        page_url: str,
        visit_duration: Optional[int] = None,
        referrer_url: Optional[str] = None,
        screen_resolution: Optional[str] = None,
        browser_name: Optional[str] = None,
        browser_version: Optional[str] = None,
        os_name: Optional[str] = None,
        device_type: Optional[str] = None,
        client: Optional[dict] = None,
    ) -> AdminPageVisit:
        session = TrackingService._resolve_session(db, session_token)
        _require("Page name and URL required", page_name, page_url)

        client = client or _EMPTY_CLIENT
        visit = AdminPageVisit(
            admin_id=session.admin_id,
            session_id=session.id,
            page_name=page_name,
            page_url=page_url,
            visit_duration=max(0, int(visit_duration or 0)),
            referrer_url=referrer_url or None,
            ip_address=client.get("ip_address"),
            user_agent=client.get("user_agent"),
            screen_resolution=screen_resolution,
            browser_name=browser_name,
            browser_version=browser_version,
            os_name=os_name,
            device_type=device_type,
        )
        db.add(visit)
        db.commit()
        db.refresh(visit)
        return visit

    @staticmethod
    def record_security_event(
        db: Session,
        event_type: str,
        event_severity: str,
        event_description: str,
        admin_id: Optional[Any] = None,
        additional_data: Optional[Any] = None,
        client: Optional[dict] = None,
    ) -> AdminSecurityEvent:
        _require("Event type, severity, and description required", event_type, event_severity, event_description)
        severity = str(event_severity).upper()
        if severity not in Severity.__members__:
            raise ValidationError(f"Invalid event severity: {event_severity}")
        if admin_id in ("", None):
            admin_id = None
        else:
            admin_id = _required_id(admin_id, "Admin ID must be an integer")
            if not db.query(Admin.id).filter(Admin.id == admin_id).first():
                raise NotFoundError("Admin not found")

        client = client or _EMPTY_CLIENT
        event = AdminSecurityEvent(
            admin_id=admin_id,
            event_type=event_type,
            event_severity=severity,
            event_description=event_description,
            ip_address=client.get("ip_address"),
            user_agent=client.get("user_agent"),
            additional_data=additional_data or None,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        if severity in (Severity.HIGH.value, Severity.CRITICAL.value):
            logger.warning(f"Security event {event.id} [{severity}] {event_type}: {event_description}")
        return event

    @staticmethod
    def resolve_security_event(db: Session, event_id: Any, resolved_by: Optional[int] = None) -> AdminSecurityEvent:
        event_id = _required_id(event_id, "Security event ID required")
        event = db.query(AdminSecurityEvent).filter(AdminSecurityEvent.id == event_id).first()
        if not event:
            raise NotFoundError("Security event not found")

        if event.resolve(resolved_by):
            db.commit()
            db.refresh(event)
            logger.info(f"Security event {event.id} resolved by admin {resolved_by}")
        return event
