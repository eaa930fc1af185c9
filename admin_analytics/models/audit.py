"""Append-only admin activity and page visit logs."""
from sqlalchemy import Column, String, Integer, Text, ForeignKey
from admin_analytics.core.database import Base
from admin_analytics.models.base import CreatedAtMixin, IDMixin, JSONType


class AdminActivityLog(IDMixin, CreatedAtMixin, Base):
    __tablename__ = "admin_activity_log"

    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("admin_sessions.id"), nullable=True, index=True)

    activity_type = Column(String(50), nullable=False, index=True)  # PAGE_LOAD, HEARTBEAT, FEATURE_USAGE, ...
    activity_category = Column(String(50), nullable=False)
    activity_description = Column(Text, nullable=False)
    target_resource = Column(String(100), nullable=True)
    target_id = Column(String(100), nullable=True)
    old_values = Column(JSONType, nullable=True)
    new_values = Column(JSONType, nullable=True)
    additional_data = Column(JSONType, nullable=True)

    # Client metadata
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)
    request_method = Column(String(10), nullable=True)
    request_url = Column(String(2048), nullable=True)
    response_status = Column(Integer, default=200)
    execution_time_ms = Column(Integer, default=0)

    def __repr__(self):
        return f"<AdminActivityLog {self.activity_type} admin={self.admin_id}>"


class AdminPageVisit(IDMixin, CreatedAtMixin, Base):
    __tablename__ = "admin_page_visits"

    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("admin_sessions.id"), nullable=True)

    page_name = Column(String(255), nullable=False)
    page_url = Column(String(2048), nullable=False)
    visit_duration = Column(Integer, default=0)  # seconds
    referrer_url = Column(String(2048), nullable=True)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)
    screen_resolution = Column(String(20), nullable=True)
    browser_name = Column(String(50), nullable=True)
    browser_version = Column(String(20), nullable=True)
    os_name = Column(String(50), nullable=True)
    device_type = Column(String(20), nullable=True)
