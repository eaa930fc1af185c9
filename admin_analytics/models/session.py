"""Admin login session model."""
from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey
from sqlalchemy.orm import relationship
from admin_analytics.core.database import Base
from admin_analytics.models.base import utcnow


class AdminSession(Base):
    __tablename__ = "admin_sessions"

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=False, index=True)

    # Only the hash of the opaque token is stored
    session_token_hash = Column(String(128), nullable=False, unique=True, index=True)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)

    login_time = Column(DateTime, default=utcnow, nullable=False, index=True)
    last_activity_at = Column(DateTime, default=utcnow, nullable=True)
    logout_time = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, index=True)
    session_duration = Column(Integer, default=0)  # seconds, set at close

    admin = relationship("Admin", back_populates="sessions")

    def close(self, when):
        """Mark the session closed and compute its duration in whole seconds."""
        self.logout_time = when
        self.is_active = False
        self.session_duration = max(0, int((when - self.login_time).total_seconds()))
