"""Tracking API integration tests."""
from datetime import timedelta

import pytest

from admin_analytics.models.analytics import FeatureUsage
from admin_analytics.models.audit import AdminActivityLog, AdminPageVisit
from admin_analytics.models.base import utcnow
from admin_analytics.models.security import AdminSecurityEvent
from admin_analytics.models.session import AdminSession


@pytest.mark.asyncio
async def test_login_opens_session_and_returns_token(async_client, db_session, make_admin):
    admin = make_admin()

    r = await async_client.post("/activity-tracking/login", json={"admin_id": admin.id})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["session_token"]

    session = db_session.query(AdminSession).filter(AdminSession.id == body["session_id"]).first()
    assert session.is_active is True
    # only the hash is stored
    assert session.session_token_hash != body["session_token"]

    login_rows = db_session.query(AdminActivityLog).filter(AdminActivityLog.activity_type == "LOGIN").all()
    assert [row.admin_id for row in login_rows] == [admin.id]


@pytest.mark.asyncio
async def test_login_errors(async_client, db_session):
    r = await async_client.post("/activity-tracking/login", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "admin_id required"}

    r = await async_client.post("/activity-tracking/login", json={"admin_id": 999999})
    assert r.status_code == 404
    assert r.json() == {"error": "Admin not found"}


@pytest.mark.asyncio
async def test_logout_closes_session_once(async_client, db_session, make_admin, login):
    admin = make_admin()
    session_id, _ = login(admin)

    r = await async_client.post("/activity-tracking/logout", json={"session_id": session_id, "admin_id": admin.id})
    assert r.status_code == 200, r.text
    assert r.json() == {"success": True, "message": "Logout tracked successfully"}

    db_session.expire_all()
    session = db_session.query(AdminSession).filter(AdminSession.id == session_id).first()
    assert session.is_active is False
    assert session.logout_time is not None
    assert session.session_duration >= 0
    first_logout = session.logout_time

    # a second logout is accepted but changes nothing
    r = await async_client.post("/activity-tracking/logout", json={"session_id": session_id, "admin_id": admin.id})
    assert r.status_code == 200
    db_session.expire_all()
    session = db_session.query(AdminSession).filter(AdminSession.id == session_id).first()
    assert session.logout_time == first_logout
    assert db_session.query(AdminActivityLog).filter(AdminActivityLog.activity_type == "LOGOUT").count() == 1


@pytest.mark.asyncio
async def test_logout_unknown_session(async_client, db_session, make_admin):
    admin = make_admin()
    r = await async_client.post("/activity-tracking/logout", json={"session_id": 424242, "admin_id": admin.id})
    assert r.status_code == 404
    assert r.json() == {"error": "Session not found"}


@pytest.mark.asyncio
async def test_activity_requires_session_header(async_client, db_session):
    r = await async_client.post(
        "/activity-tracking/activity",
        json={"activity_type": "PAGE_LOAD", "activity_category": "NAVIGATION", "description": "Loaded page"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Admin session token required"}
    assert db_session.query(AdminActivityLog).count() == 0


@pytest.mark.asyncio
async def test_activity_rejects_unknown_token(async_client, db_session):
    r = await async_client.post(
        "/activity-tracking/activity",
        headers={"X-Admin-Session": "not-a-real-token"},
        json={"activity_type": "PAGE_LOAD", "activity_category": "NAVIGATION", "description": "Loaded page"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid or expired session"}


@pytest.mark.asyncio
async def test_activity_is_recorded_against_session(async_client, db_session, make_admin, login):
    admin = make_admin()
    session_id, token = login(admin)

    r = await async_client.post(
        "/activity-tracking/activity",
        headers={"X-Admin-Session": token},
        json={
            "activity_type": "DATA_CHANGE",
            "activity_category": "DATA_MANAGEMENT",
            "description": "UPDATE operation on users",
            "target_resource": "users",
            "target_id": 12,
            "old_values": {"status": "pending"},
            "new_values": {"status": "active"},
        },
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"success": True, "message": "Activity tracked successfully"}

    activity = (
        db_session.query(AdminActivityLog)
        .filter(AdminActivityLog.activity_type == "DATA_CHANGE")
        .one()
    )
    assert activity.admin_id == admin.id
    assert activity.session_id == session_id
    assert activity.target_id == "12"
    assert activity.new_values == {"status": "active"}
    assert activity.request_method == "POST"
    assert activity.execution_time_ms >= 0


@pytest.mark.asyncio
async def test_idle_session_is_rejected(async_client, db_session, make_admin, login):
    admin = make_admin()
    session_id, token = login(admin)

    session = db_session.query(AdminSession).filter(AdminSession.id == session_id).first()
    session.last_activity_at = utcnow() - timedelta(hours=2)
    db_session.commit()

    r = await async_client.post(
        "/activity-tracking/activity",
        headers={"X-Admin-Session": token},
        json={"activity_type": "HEARTBEAT", "activity_category": "SYSTEM", "description": "Session heartbeat"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid or expired session"}


@pytest.mark.asyncio
async def test_feature_usage_activity_updates_rollup(async_client, db_session, make_admin, login):
    admin = make_admin()
    _, token = login(admin)
    headers = {"X-Admin-Session": token}

    for success in (True, True, False):
        r = await async_client.post(
            "/activity-tracking/activity",
            headers=headers,
            json={
                "activity_type": "FEATURE_USAGE",
                "activity_category": "REPORTS",
                "description": "Used feature: export",
                "target_resource": "export",
                "additional_data": {"success": success, "execution_time": 40},
            },
        )
        assert r.status_code == 200, r.text

    usage = db_session.query(FeatureUsage).filter(FeatureUsage.admin_id == admin.id).one()
    assert usage.feature_name == "export"
    assert usage.usage_count == 3
    assert usage.success_count == 2
    assert usage.error_count == 1
    assert usage.total_time_spent == 120


@pytest.mark.asyncio
async def test_page_visit_is_recorded(async_client, db_session, make_admin, login):
    admin = make_admin()
    _, token = login(admin)

    r = await async_client.post(
        "/activity-tracking/page-visit",
        headers={"X-Admin-Session": token},
        json={
            "page_name": "Dashboard",
            "page_url": "https://admin.example.com/dashboard",
            "visit_duration": 0,
            "screen_resolution": "1920x1080",
            "browser_name": "Firefox",
            "browser_version": "120",
            "os_name": "Linux",
            "device_type": "desktop",
        },
    )
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Page visit tracked successfully"

    visit = db_session.query(AdminPageVisit).one()
    assert visit.admin_id == admin.id
    assert visit.browser_name == "Firefox"


@pytest.mark.asyncio
async def test_security_event_without_session(async_client, db_session):
    r = await async_client.post(
        "/activity-tracking/security-event",
        json={"event_type": "ERROR", "event_severity": "medium", "event_description": "TypeError: x is undefined"},
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"success": True, "message": "Security event tracked successfully"}

    event = db_session.query(AdminSecurityEvent).one()
    assert event.event_severity == "MEDIUM"
    assert event.admin_id is None
    assert event.is_resolved is False


@pytest.mark.asyncio
async def test_security_event_for_unknown_admin(async_client, db_session):
    r = await async_client.post(
        "/activity-tracking/security-event",
        json={"event_type": "ERROR", "event_severity": "LOW", "event_description": "ghost", "admin_id": 999},
    )
    assert r.status_code == 404
    assert r.json() == {"error": "Admin not found"}
    assert db_session.query(AdminSecurityEvent).count() == 0


@pytest.mark.asyncio
async def test_security_event_rejects_unknown_severity(async_client, db_session):
    r = await async_client.post(
        "/activity-tracking/security-event",
        json={"event_type": "ERROR", "event_severity": "URGENT", "event_description": "boom"},
    )
    assert r.status_code == 400
    assert "event_severity" in r.json()["error"]
    assert db_session.query(AdminSecurityEvent).count() == 0


@pytest.mark.asyncio
async def test_resolve_security_event_is_one_way(async_client, db_session, make_admin, login):
    admin = make_admin()
    _, token = login(admin)
    event = AdminSecurityEvent(event_type="SUSPICIOUS_ACTIVITY", event_severity="HIGH", event_description="bulk export")
    db_session.add(event)
    db_session.commit()

    r = await async_client.post(
        f"/activity-tracking/security-events/{event.id}/resolve",
        headers={"X-Admin-Session": token},
    )
    assert r.status_code == 200, r.text
    resolved = r.json()["security_event"]
    assert resolved["is_resolved"] is True
    assert resolved["resolved_by"] == admin.id
    first_resolved_at = resolved["resolved_at"]
    assert first_resolved_at

    r = await async_client.post(
        f"/activity-tracking/security-events/{event.id}/resolve",
        headers={"X-Admin-Session": token},
    )
    assert r.status_code == 200
    assert r.json()["security_event"]["resolved_at"] == first_resolved_at


@pytest.mark.asyncio
async def test_resolve_requires_session(async_client, db_session):
    r = await async_client.post("/activity-tracking/security-events/1/resolve")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_write_endpoints_are_rate_limited(async_client, db_session, monkeypatch):
    from admin_analytics.core.config import settings

    monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 2)
    payload = {"event_type": "ERROR", "event_severity": "LOW", "event_description": "noise"}

    for _ in range(2):
        r = await async_client.post("/activity-tracking/security-event", json=payload)
        assert r.status_code == 200

    r = await async_client.post("/activity-tracking/security-event", json=payload)
    assert r.status_code == 429
    assert r.json() == {"error": "Too many requests. Please slow down."}
