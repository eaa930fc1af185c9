"""Admin model. Rows are created out-of-band by the authentication system."""
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from admin_analytics.core.database import Base
from admin_analytics.models.base import IDMixin, utcnow


class Admin(IDMixin, Base):
    __tablename__ = "admins"

    username = Column(String(100), unique=True, index=True, nullable=False)
    display_name = Column(String(150), nullable=True)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    sessions = relationship("AdminSession", back_populates="admin")

    def __repr__(self):
        return f"<Admin {self.username}>"
