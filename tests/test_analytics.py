"""Analytics queries and list endpoints."""
from datetime import timedelta

import pytest

from admin_analytics.models.analytics import AdminPerformanceMetric
from admin_analytics.models.audit import AdminActivityLog
from admin_analytics.models.base import utcnow
from admin_analytics.services.analytics_service import MAX_DAILY_DAYS, AnalyticsService
from admin_analytics.services.tracking_service import TrackingService
from admin_analytics.utils.errors import NotFoundError, ValidationError


def _activity(db_session, admin, days_ago, activity_type="PAGE_LOAD"):
    db_session.add(AdminActivityLog(
        admin_id=admin.id,
        activity_type=activity_type,
        activity_category="NAVIGATION",
        activity_description="seeded",
        created_at=utcnow() - timedelta(days=days_ago),
        execution_time_ms=10,
    ))
    db_session.commit()


def test_summary_counts_today_only(db_session, make_admin, login):
    admin = make_admin()
    login(admin)
    _activity(db_session, admin, days_ago=3)

    result = AnalyticsService.query_analytics(db_session, "summary")
    assert result["date"] == utcnow().date().isoformat()
    summary = result["analytics"]
    assert summary["total_sessions"] == 1
    assert summary["active_sessions"] == 1
    # the LOGIN row only
    assert summary["total_activities"] == 1
    assert summary["unique_admins"] == 1


def test_daily_window_includes_both_ends(db_session, make_admin):
    admin = make_admin()
    for days_ago in (0, 2, 7, 8):
        _activity(db_session, admin, days_ago)

    rows = AnalyticsService.query_analytics(db_session, "daily", days=7)["daily_analytics"]
    dates = [row["date"] for row in rows]
    assert len(dates) == 3
    assert dates == sorted(dates, reverse=True)
    assert dates[0] == utcnow().date().isoformat()


def test_daily_rejects_negative_days(db_session):
    with pytest.raises(ValidationError):
        AnalyticsService.query_analytics(db_session, "daily", days=-1)


def test_daily_rejects_oversized_window(db_session):
    with pytest.raises(ValidationError):
        AnalyticsService.query_analytics(db_session, "daily", days=MAX_DAILY_DAYS + 1)
    assert AnalyticsService.query_analytics(db_session, "daily", days=MAX_DAILY_DAYS)["daily_analytics"] == []


@pytest.mark.asyncio
async def test_daily_endpoint_rejects_huge_days(async_client, db_session):
    r = await async_client.get("/activity-tracking/analytics?type=daily&days=10000000")
    assert r.status_code == 400
    assert "error" in r.json()



def test_admin_analytics_does_not_multiply_counts(db_session, make_admin, login):
    admin = make_admin()
    login(admin)
    login(admin)
    _activity(db_session, admin, days_ago=0)

    stats = AnalyticsService.query_analytics(db_session, "admin", admin_id=admin.id)["admin_analytics"]
    assert stats["username"] == admin.username
    assert stats["total_sessions"] == 2
    # two LOGIN rows plus one seeded activity, not multiplied by the session count
    assert stats["total_activities"] == 3
    assert stats["unique_activity_types"] == 2


def test_admin_analytics_errors(db_session):
    with pytest.raises(ValidationError):
        AnalyticsService.query_analytics(db_session, "admin")
    with pytest.raises(NotFoundError):
        AnalyticsService.query_analytics(db_session, "admin", admin_id=123456)


def test_unknown_analytics_kind(db_session):
    with pytest.raises(ValidationError) as exc:
        AnalyticsService.query_analytics(db_session, "weekly")
    assert exc.value.detail == "Invalid analytics type"


def test_security_breakdown(db_session):
    TrackingService.record_security_event(db_session, "ERROR", "LOW", "a")
    TrackingService.record_security_event(db_session, "ERROR", "LOW", "b")
    event = TrackingService.record_security_event(db_session, "SUSPICIOUS_ACTIVITY", "HIGH", "c")
    TrackingService.resolve_security_event(db_session, event.id)

    rows = AnalyticsService.query_analytics(db_session, "security")["security_analytics"]
    assert rows[0] == {
        "event_type": "ERROR",
        "event_severity": "LOW",
        "event_count": 2,
        "resolved_count": 0,
        "pending_count": 2,
    }
    assert rows[1]["resolved_count"] == 1


def test_performance_reads_rollup(db_session, make_admin):
    admin = make_admin()
    db_session.add(AdminPerformanceMetric(
        admin_id=admin.id, date=utcnow().date(), total_activities=12, success_rate=97.5, error_count=1,
    ))
    db_session.commit()

    rows = AnalyticsService.query_analytics(db_session, "performance")["performance_analytics"]
    assert rows[0]["username"] == admin.username
    assert rows[0]["success_rate"] == 97.5


@pytest.mark.asyncio
async def test_analytics_endpoint(async_client, db_session, make_admin, login):
    admin = make_admin()
    login(admin)

    r = await async_client.get("/activity-tracking/analytics")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["analytics"]["total_sessions"] == 1

    r = await async_client.get(f"/activity-tracking/analytics?type=admin&admin_id={admin.id}")
    assert r.json()["admin_analytics"]["total_sessions"] == 1

    r = await async_client.get("/activity-tracking/analytics?type=yearly")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid analytics type"}


@pytest.mark.asyncio
async def test_list_endpoints(async_client, db_session, make_admin, login):
    alice = make_admin("alice")
    bob = make_admin("bob")
    login(alice)
    bob_session, _ = login(bob)
    TrackingService.logout(db_session, bob_session, bob.id)
    TrackingService.record_security_event(db_session, "ERROR", "LOW", "minor")
    TrackingService.record_security_event(db_session, "ERROR", "CRITICAL", "major")

    r = await async_client.get("/activity-tracking/sessions?active=true")
    sessions = r.json()["sessions"]
    assert [s["username"] for s in sessions] == ["alice"]

    r = await async_client.get(f"/activity-tracking/activities?admin_id={bob.id}")
    activities = r.json()["activities"]
    assert [a["activity_type"] for a in activities] == ["LOGOUT", "LOGIN"]

    r = await async_client.get("/activity-tracking/activities?limit=1")
    assert len(r.json()["activities"]) == 1

    r = await async_client.get("/activity-tracking/security-events?severity=critical&resolved=false")
    events = r.json()["security_events"]
    assert [e["event_description"] for e in events] == ["major"]

    r = await async_client.get("/activity-tracking/performance")
    assert r.json() == {"success": True, "performance": []}


@pytest.mark.asyncio
async def test_list_filters_reject_bad_values(async_client, db_session):
    r = await async_client.get("/activity-tracking/sessions?admin_id=abc")
    assert r.status_code == 400

    r = await async_client.get("/activity-tracking/performance?date=yesterday")
    assert r.status_code == 400
