"""Pytest fixtures for async FastAPI testing.

Loads `.env.test` before any application module reads settings, creates a
clean SQLite schema for the session, empties the tables before each test
and provides an `AsyncClient` bound to the app through `ASGITransport`.
"""
import os
import pathlib
import uuid

import pytest
from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=str(ROOT / ".env.test"))
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_admin_analytics.db")


@pytest.fixture(scope="session")
def prepare_database():
    """Create clean schema for the test session."""
    from admin_analytics.core.database import engine, Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(prepare_database):
    """Yield a SQLAlchemy session over freshly emptied tables."""
    from admin_analytics.core.database import Base, SessionLocal, engine

    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    from admin_analytics.dependencies.rate_limit import limiter

    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
async def async_client(db_session):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    from httpx import ASGITransport, AsyncClient
    from admin_analytics.main import create_app

    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
def make_admin(db_session):
    """Factory creating committed admin rows."""
    from admin_analytics.models.admin import Admin

    def _make(username=None, display_name=None):
        username = username or f"admin-{uuid.uuid4().hex[:8]}"
        admin = Admin(username=username, display_name=display_name or username.title(), email=f"{username}@example.com")
        db_session.add(admin)
        db_session.commit()
        return admin

    return _make


@pytest.fixture
def login(db_session):
    """Open a session for an admin through the service; returns ``(session_id, token)``."""
    from admin_analytics.services.tracking_service import TrackingService

    def _login(admin):
        result = TrackingService.login(db_session, admin.id)
        return result["session_id"], result["session_token"]

    return _login
