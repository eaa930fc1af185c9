"""Tracking API: session lifecycle, activity capture and analytics reads."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from admin_analytics.core.database import get_db
from admin_analytics.dependencies.auth import get_current_session
from admin_analytics.dependencies.rate_limit import rate_limit
from admin_analytics.middleware.logging import elapsed_ms
from admin_analytics.models.session import AdminSession
from admin_analytics.schemas.common import ErrorResponse, LoginResponse, MessageResponse
from admin_analytics.schemas.tracking import (
    ActivityRequest,
    LoginRequest,
    LogoutRequest,
    PageVisitRequest,
    SecurityEventRequest,
)
from admin_analytics.services.analytics_service import AnalyticsService
from admin_analytics.services.tracking_service import TrackingService
from admin_analytics.utils.helpers import get_client_info

router = APIRouter(
    prefix="/activity-tracking",
    tags=["activity-tracking"],
    responses={status: {"model": ErrorResponse} for status in (400, 401, 404, 429)},
)


@router.post("/login", response_model=LoginResponse)
async def track_login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    result = TrackingService.login(db, payload.admin_id, get_client_info(request))
    return {"success": True, **result}


@router.post("/logout", response_model=MessageResponse)
async def track_logout(
    payload: LogoutRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    TrackingService.logout(db, payload.session_id, payload.admin_id, get_client_info(request))
    return {"success": True, "message": "Logout tracked successfully"}


@router.post("/activity", response_model=MessageResponse)
async def track_activity(
    payload: ActivityRequest,
    request: Request,
    session: AdminSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    TrackingService.record_activity(
        db,
        session,
        payload.activity_type,
        payload.activity_category,
        payload.description,
        target_resource=payload.target_resource,
        target_id=payload.target_id,
        old_values=payload.old_values,
        new_values=payload.new_values,
        additional_data=payload.additional_data,
        client=get_client_info(request),
        execution_time_ms=elapsed_ms(request),
    )
    return {"success": True, "message": "Activity tracked successfully"}


@router.post("/page-visit", response_model=MessageResponse)
async def track_page_visit(
    payload: PageVisitRequest,
    request: Request,
    session: AdminSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    TrackingService.record_page_visit(
        db,
        session,
        client=get_client_info(request),
        **payload.model_dump(),
    )
    return {"success": True, "message": "Page visit tracked successfully"}


@router.post("/security-event", response_model=MessageResponse)
async def track_security_event(
    payload: SecurityEventRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    TrackingService.record_security_event(
        db,
        payload.event_type,
        payload.event_severity,
        payload.event_description,
        admin_id=payload.admin_id,
        additional_data=payload.additional_data,
        client=get_client_info(request),
    )
    return {"success": True, "message": "Security event tracked successfully"}


@router.post("/security-events/{event_id}/resolve")
async def resolve_security_event(
    event_id: int,
    session: AdminSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    event = TrackingService.resolve_security_event(db, event_id, resolved_by=session.admin_id)
    return {"success": True, "security_event": AnalyticsService.security_event_dict(event)}


@router.get("/analytics")
async def get_analytics(
    type: str = Query("summary"),
    day: Optional[date] = Query(None, alias="date"),
    admin_id: Optional[int] = Query(None),
    days: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    result = AnalyticsService.query_analytics(db, type, day=day, admin_id=admin_id, days=days)
    return {"success": True, **result}


@router.get("/sessions")
async def list_sessions(
    admin_id: Optional[int] = Query(None),
    active: Optional[bool] = Query(None),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return {"success": True, "sessions": AnalyticsService.list_sessions(db, admin_id, active, limit)}


@router.get("/activities")
async def list_activities(
    admin_id: Optional[int] = Query(None),
    activity_type: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return {
        "success": True,
        "activities": AnalyticsService.list_activities(db, admin_id, activity_type, limit),
    }


@router.get("/security-events")
async def list_security_events(
    severity: Optional[str] = Query(None),
    resolved: Optional[bool] = Query(None),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return {
        "success": True,
        "security_events": AnalyticsService.list_security_events(db, severity, resolved, limit),
    }


@router.get("/performance")
async def list_performance(
    day: Optional[date] = Query(None, alias="date"),
    admin_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return {"success": True, "performance": AnalyticsService.list_performance(db, day, admin_id)}
