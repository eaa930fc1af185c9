from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin_analytics.core.config import settings
from admin_analytics.core.constants import SESSION_HEADER


def configure_cors(app: FastAPI) -> None:
    """Allow the tracking collector to call the API from admin pages on other origins."""
    origins = [o.strip() for o in (settings.BACKEND_CORS_ORIGINS or "").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", SESSION_HEADER],
    )
