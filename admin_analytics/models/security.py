"""Security events flagged by the API or relayed from the client collector."""
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import validates
from admin_analytics.core.database import Base
from admin_analytics.models.base import CreatedAtMixin, IDMixin, JSONType, utcnow


class AdminSecurityEvent(IDMixin, CreatedAtMixin, Base):
    __tablename__ = "admin_security_events"

    admin_id = Column(Integer, ForeignKey("admins.id"), nullable=True, index=True)
    event_type = Column(String(50), nullable=False, index=True)  # ERROR, SUSPICIOUS_ACTIVITY, ...
    event_severity = Column(String(10), nullable=False, index=True)  # LOW | MEDIUM | HIGH | CRITICAL
    event_description = Column(Text, nullable=False)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)
    additional_data = Column(JSONType, nullable=True)

    is_resolved = Column(Boolean, default=False, nullable=False, index=True)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(Integer, ForeignKey("admins.id"), nullable=True)

    @validates("is_resolved")
    def _one_way_resolution(self, key, value):
        if self.is_resolved and not value:
            raise ValueError("A resolved security event cannot be reopened")
        return bool(value)

    def resolve(self, resolved_by=None):
        """Flip to resolved; returns False when the event was already resolved."""
        if self.is_resolved:
            return False
        self.is_resolved = True
        self.resolved_at = utcnow()
        self.resolved_by = resolved_by
        return True
