"""Service layer tests."""
import pytest

from admin_analytics.core.security import hash_token
from admin_analytics.models.audit import AdminActivityLog
from admin_analytics.models.security import AdminSecurityEvent
from admin_analytics.services.tracking_service import TrackingService
from admin_analytics.utils.errors import AuthError, NotFoundError, ValidationError
from admin_analytics.utils.helpers import percentage, success_rate, to_plain


def test_success_rate_guards_zero_total():
    assert success_rate(0, 0) == 0
    assert success_rate(9, 10) == 90.0
    assert percentage(1, 3) == 33.33


def test_to_plain_converts_db_values():
    from datetime import date, datetime
    from decimal import Decimal

    assert to_plain(Decimal("12.00")) == 12
    assert to_plain(Decimal("12.50")) == 12.5
    assert to_plain(date(2024, 3, 1)) == "2024-03-01"
    assert to_plain(datetime(2024, 3, 1, 8, 30)) == "2024-03-01T08:30:00"
    assert to_plain("x") == "x"


def test_token_hash_is_stable_and_opaque():
    digest = hash_token("abc")
    assert digest != "abc"
    assert digest == hash_token("abc")
    assert digest != hash_token("abd")


def test_login_requires_admin_id(db_session):
    with pytest.raises(ValidationError):
        TrackingService.login(db_session, None)
    with pytest.raises(NotFoundError):
        TrackingService.login(db_session, 987654)


def test_logout_requires_both_ids(db_session):
    with pytest.raises(ValidationError) as exc:
        TrackingService.logout(db_session, None, 1)
    assert exc.value.detail == "Session ID and Admin ID required"


def test_record_activity_without_token_persists_nothing(db_session):
    with pytest.raises(AuthError):
        TrackingService.record_activity(db_session, None, "PAGE_LOAD", "NAVIGATION", "Loaded page")
    assert db_session.query(AdminActivityLog).count() == 0


def test_record_activity_requires_fields(db_session, make_admin, login):
    admin = make_admin()
    _, token = login(admin)
    with pytest.raises(ValidationError):
        TrackingService.record_activity(db_session, token, "PAGE_LOAD", "", "Loaded page")


def test_security_event_resolution_cannot_be_reverted(db_session):
    event = TrackingService.record_security_event(db_session, "ERROR", "low", "Something odd")
    assert event.event_severity == "LOW"

    resolved = TrackingService.resolve_security_event(db_session, event.id, resolved_by=None)
    assert resolved.is_resolved is True
    resolved_at = resolved.resolved_at
    assert resolved_at is not None

    with pytest.raises(ValueError):
        resolved.is_resolved = False
    db_session.rollback()

    again = TrackingService.resolve_security_event(db_session, event.id)
    assert again.resolved_at == resolved_at


def test_resolve_unknown_event(db_session):
    with pytest.raises(NotFoundError):
        TrackingService.resolve_security_event(db_session, 31337)


def test_security_event_rejects_bad_severity(db_session):
    with pytest.raises(ValidationError):
        TrackingService.record_security_event(db_session, "ERROR", "SEVERE", "bad")
    assert db_session.query(AdminSecurityEvent).count() == 0


def test_security_event_for_unknown_admin(db_session, make_admin):
    with pytest.raises(NotFoundError):
        TrackingService.record_security_event(db_session, "ERROR", "LOW", "ghost", admin_id=424242)
    assert db_session.query(AdminSecurityEvent).count() == 0

    admin = make_admin()
    event = TrackingService.record_security_event(db_session, "ERROR", "LOW", "known", admin_id=str(admin.id))
    assert event.admin_id == admin.id


def test_feature_usage_reads_string_success_flags(db_session, make_admin, login):
    from admin_analytics.models.analytics import FeatureUsage

    admin = make_admin()
    _, token = login(admin)
    for flag in ("false", "0", "true", False):
        TrackingService.record_activity(
            db_session, token, "FEATURE_USAGE", "USERS", "Used feature: bulk_edit",
            target_resource="bulk_edit", additional_data={"success": flag},
        )

    usage = db_session.query(FeatureUsage).one()
    assert usage.usage_count == 4
    assert usage.success_count == 1
    assert usage.error_count == 3
