from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from admin_analytics.core.config import settings
from admin_analytics.core.database import get_db
from admin_analytics.models.session import AdminSession
from admin_analytics.services.tracking_service import TrackingService
from admin_analytics.utils.errors import AuthError


async def get_session_token(
    x_admin_session: Optional[str] = Header(default=None, alias="X-Admin-Session"),
) -> Optional[str]:
    """Raw token from the X-Admin-Session header; blank headers count as missing."""
    if x_admin_session is None or not x_admin_session.strip():
        return None
    return x_admin_session.strip()


async def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> AdminSession:
    """Require a valid, active admin session"""
    session = TrackingService.authenticate(db, token)
    db.commit()
    return session


def get_report_viewer(request: Request, db: Session) -> Optional[AdminSession]:
    """Session of the admin browsing the HTML/export pages, or None when anonymous.

    The pages accept the session cookie set by the login page as well as the
    X-Admin-Session header used by API clients.
    """
    token = request.cookies.get(settings.ADMIN_SESSION_COOKIE) or request.headers.get("x-admin-session")
    if not token:
        return None
    try:
        return TrackingService.authenticate(db, token, touch=False)
    except AuthError:
        return None
