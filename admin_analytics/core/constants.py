"""Application constants: severities, report types, date ranges and client tunables."""
from enum import Enum


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReportType(str, Enum):
    OVERVIEW = "overview"
    ADMIN_ACTIVITY = "admin_activity"
    SECURITY = "security"
    PERFORMANCE = "performance"
    FEATURE_USAGE = "feature_usage"
    SYSTEM_HEALTH = "system_health"


class DateRange(str, Enum):
    ONE_DAY = "1d"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    NINETY_DAYS = "90d"
    ONE_YEAR = "1y"


DEFAULT_DATE_RANGE = DateRange.SEVEN_DAYS


class ExportFormat(str, Enum):
    HTML = "html"
    CSV = "csv"
    JSON = "json"


class AnalyticsKind(str, Enum):
    SUMMARY = "summary"
    DAILY = "daily"
    ADMIN = "admin"
    SECURITY = "security"
    PERFORMANCE = "performance"


class ActivityType(str, Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    PAGE_LOAD = "PAGE_LOAD"
    PAGE_HIDDEN = "PAGE_HIDDEN"
    PAGE_VISIBLE = "PAGE_VISIBLE"
    HEARTBEAT = "HEARTBEAT"
    FORM_SUBMIT = "FORM_SUBMIT"
    FILE_UPLOAD = "FILE_UPLOAD"
    DATA_CHANGE = "DATA_CHANGE"
    FEATURE_USAGE = "FEATURE_USAGE"


class ActivityCategory(str, Enum):
    AUTHENTICATION = "AUTHENTICATION"
    NAVIGATION = "NAVIGATION"
    INTERACTION = "INTERACTION"
    SYSTEM = "SYSTEM"
    DATA_MANAGEMENT = "DATA_MANAGEMENT"


# Header carrying the opaque admin session token.
SESSION_HEADER = "X-Admin-Session"

RECENT_SECURITY_EVENTS_LIMIT = 50

# Client collector tunables
HEARTBEAT_INTERVAL_SECONDS = 300
FAILED_REQUESTS_CAP = 50
CLIENT_SESSION_MAX_AGE_SECONDS = 24 * 60 * 60
MOBILE_MAX_WIDTH = 768
TABLET_MAX_WIDTH = 1024


class SecurityEventType(str, Enum):
    ERROR = "ERROR"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    TRACKING_FAILURE = "TRACKING_FAILURE"
