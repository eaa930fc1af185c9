"""Typed filters for the list endpoints.

Each supported filter is a ``FilterName`` member bound to a column and a
comparison; ``build_predicates`` turns the supplied values into SQLAlchemy
expressions, so every value travels as a bound parameter.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Mapping

from admin_analytics.core.config import settings
from admin_analytics.models.audit import AdminActivityLog
from admin_analytics.models.analytics import AdminPerformanceMetric
from admin_analytics.models.security import AdminSecurityEvent
from admin_analytics.models.session import AdminSession
from admin_analytics.utils.errors import ValidationError


class FilterName(str, Enum):
    SESSION_ADMIN_ID = "session_admin_id"
    SESSION_ACTIVE = "session_active"
    ACTIVITY_ADMIN_ID = "activity_admin_id"
    ACTIVITY_TYPE = "activity_type"
    EVENT_SEVERITY = "event_severity"
    EVENT_RESOLVED = "event_resolved"
    PERFORMANCE_DATE = "performance_date"
    PERFORMANCE_ADMIN_ID = "performance_admin_id"


@dataclass(frozen=True)
class FilterSpec:
    column: Any
    coerce: Callable[[Any], Any]


def _int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Expected an integer, got {value!r}")


def _date(value):
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Expected a YYYY-MM-DD date, got {value!r}")


FILTERS: dict[FilterName, FilterSpec] = {
    FilterName.SESSION_ADMIN_ID: FilterSpec(AdminSession.admin_id, _int),
    FilterName.SESSION_ACTIVE: FilterSpec(AdminSession.is_active, bool),
    FilterName.ACTIVITY_ADMIN_ID: FilterSpec(AdminActivityLog.admin_id, _int),
    FilterName.ACTIVITY_TYPE: FilterSpec(AdminActivityLog.activity_type, str),
    FilterName.EVENT_SEVERITY: FilterSpec(AdminSecurityEvent.event_severity, lambda v: str(v).upper()),
    FilterName.EVENT_RESOLVED: FilterSpec(AdminSecurityEvent.is_resolved, bool),
    FilterName.PERFORMANCE_DATE: FilterSpec(AdminPerformanceMetric.date, _date),
    FilterName.PERFORMANCE_ADMIN_ID: FilterSpec(AdminPerformanceMetric.admin_id, _int),
}


def build_predicates(filters: Mapping[FilterName, Any]) -> list:
    """Compile ``{FilterName: value}`` into equality predicates, skipping ``None`` values."""
    predicates = []
    for name, value in filters.items():
        if value is None:
            continue
        entry = FILTERS[FilterName(name)]
        predicates.append(entry.column == entry.coerce(value))
    return predicates


def clamp_limit(limit: int | None, default: int | None = None) -> int:
    if limit is None:
        return default or settings.DEFAULT_LIST_LIMIT
    return max(1, min(int(limit), settings.MAX_LIST_LIMIT))
