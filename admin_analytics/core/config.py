import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class Settings:
    ENV: str = os.getenv("ENV", "local")
    APP_NAME: str = os.getenv("APP_NAME", "Admin Analytics")

    # Database
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", 20))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", 10))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Admin sessions
    # Sessions with no authenticated call for this long are rejected (0 disables).
    ADMIN_SESSION_IDLE_MINUTES: int = int(os.getenv("ADMIN_SESSION_IDLE_MINUTES", 30))
    ADMIN_SESSION_COOKIE: str = os.getenv("ADMIN_SESSION_COOKIE", "admin_session")
    LOGIN_URL: str = os.getenv("LOGIN_URL", "/admin/login")

    # Read endpoints
    DEFAULT_LIST_LIMIT: int = int(os.getenv("DEFAULT_LIST_LIMIT", 100))
    MAX_LIST_LIMIT: int = int(os.getenv("MAX_LIST_LIMIT", 500))

    # CORS
    BACKEND_CORS_ORIGINS: Optional[str] = os.getenv("BACKEND_CORS_ORIGINS", "*")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "True").lower() == "true"
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", 100))
    RATE_LIMIT_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_PERIOD_SECONDS", 60))


settings = Settings()
