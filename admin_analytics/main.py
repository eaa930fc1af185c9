from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from admin_analytics.core.config import settings
from admin_analytics.core.logger import setup_logging
from admin_analytics.middleware.cors import configure_cors
from admin_analytics.middleware.logging import RequestLoggerMiddleware
from admin_analytics.middleware import error_handler

# Routers
from admin_analytics.routers import tracking as tracking_router
from admin_analytics.routers import reports as reports_router
from admin_analytics.routers import health as health_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    description = (
        "Admin activity tracking and analytics.\n\n"
        "Records admin sessions, activities, page visits and security events, "
        "and serves analytics queries, canned reports and the live dashboard."
    )

    openapi_tags = [
        {"name": "activity-tracking", "description": "Session lifecycle, activity capture and analytics queries."},
        {"name": "reports", "description": "HTML reports, CSV/JSON exports and the dashboard."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
    )

    # Middleware
    configure_cors(app)
    app.add_middleware(RequestLoggerMiddleware)

    # Exception handlers
    app.add_exception_handler(StarletteHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(RequestValidationError, error_handler.validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, error_handler.database_exception_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(tracking_router.router)
    app.include_router(reports_router.router)

    return app


app = create_app()
