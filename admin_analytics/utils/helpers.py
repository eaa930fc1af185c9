"""Helper utilities (client info, result marshaling, derived metrics)."""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

from fastapi import Request


def get_client_ip(request: Request) -> str:
    """Return client's IP address from request headers or connection info.

    Checks `X-Forwarded-For` first (comma-separated), then falls back to
    `request.client.host`. Returns 'unknown' if not found.
    """
    x_forwarded_for = request.headers.get("x-forwarded-for")
    if x_forwarded_for:
        # X-Forwarded-For can contain a list of IPs
        return x_forwarded_for.split(",")[0].strip()

    client = getattr(request, "client", None)
    if client and getattr(client, "host", None):
        return client.host

    return "unknown"


def get_client_info(request: Request) -> dict:
    return {
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("user-agent", "unknown"),
        "request_method": request.method,
        "request_url": str(request.url.path) + (f"?{request.url.query}" if request.url.query else ""),
    }


def day_window(start: date, end: date) -> tuple[datetime, datetime]:
    """Half-open datetime bounds covering the calendar days ``start..end`` inclusive."""
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end + timedelta(days=1), time.min)
    return lower, upper


def percentage(part: Optional[float], total: Optional[float]) -> float:
    """``part / total * 100`` rounded to 2 decimals; 0 when there is nothing to divide by."""
    if not total:
        return 0
    return round(float(part or 0) / float(total) * 100, 2)


def success_rate(success_count: Optional[float], total: Optional[float]) -> float:
    return percentage(success_count, total)


def to_plain(value: Any) -> Any:
    """Convert a single DB value into a JSON-ready primitive."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return round(float(value), 2)
    if isinstance(value, float):
        return round(value, 2)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def row_to_dict(row) -> Optional[dict]:
    if row is None:
        return None
    return {key: to_plain(value) for key, value in row._mapping.items()}


def rows_to_dicts(rows: Iterable) -> list[dict]:
    return [row_to_dict(row) for row in rows]


def model_to_dict(instance, fields: Iterable[str]) -> dict:
    return {field: to_plain(getattr(instance, field)) for field in fields}
