"""Request/response logging middleware."""
import logging
import time
from starlette.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("admin_analytics.middleware.logging")


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Logs each request and stamps ``request.state.started_at``.

    The activity endpoint reads ``started_at`` to store how long the tracked
    request took.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.started_at = time.perf_counter()
        logger.info(f"{request.method} {request.url.path}")
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - request.state.started_at) * 1000
        logger.info(f"Response status: {response.status_code} ({elapsed_ms:.1f} ms)")
        return response


def elapsed_ms(request: Request) -> int:
    started_at = getattr(request.state, "started_at", None)
    if started_at is None:
        return 0
    return int((time.perf_counter() - started_at) * 1000)
