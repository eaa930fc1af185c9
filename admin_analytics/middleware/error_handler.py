"""Global error handlers: every error leaves the API as ``{"error": <message>}``."""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

_FIELD_LABELS = {
    "x-admin-session": "Admin session token",
}


async def http_exception_handler(request: Request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _describe(error: dict) -> str:
    field = next((str(part) for part in reversed(error.get("loc", ())) if not isinstance(part, int)), None)
    label = _FIELD_LABELS.get(str(field).lower(), field)
    if error.get("type") == "missing":
        return f"{label} required"
    if error.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    return f"{label}: {error.get('msg')}" if label else str(error.get("msg"))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = _describe(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Storage failure on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
