"""Base SQLAlchemy model utilities."""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer, JSON
from sqlalchemy.dialects.postgresql import JSONB


def utcnow() -> datetime:
    """Naive UTC timestamp; every tracking row is stamped server side with this."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# JSONB on Postgres, plain JSON elsewhere (SQLite in tests, MySQL)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class CreatedAtMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class IDMixin:
    id = Column(Integer, primary_key=True, index=True)
