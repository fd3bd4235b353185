"""
Audit Log model for tracking security-relevant actions inside a church.
"""
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from faithsite.database import Base
from faithsite.models.mixins import TenantScopedMixin, new_id, utcnow


class AuditAction(enum.Enum):
    """Enumeration of auditable actions."""
    # Authentication
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGOUT = "LOGOUT"
    CHURCH_SWITCHED = "CHURCH_SWITCHED"

    # Content
    CONTENT_CREATED = "CONTENT_CREATED"
    CONTENT_UPDATED = "CONTENT_UPDATED"
    CONTENT_PUBLISHED = "CONTENT_PUBLISHED"
    CONTENT_UNPUBLISHED = "CONTENT_UNPUBLISHED"
    CONTENT_DELETED = "CONTENT_DELETED"

    # Team
    USER_ROLE_CHANGED = "USER_ROLE_CHANGED"
    USER_INVITED = "USER_INVITED"
    INVITE_ACCEPTED = "INVITE_ACCEPTED"
    USER_DEACTIVATED = "USER_DEACTIVATED"

    # Platform
    CHURCH_SUSPENDED = "CHURCH_SUSPENDED"
    CHURCH_UNSUSPENDED = "CHURCH_UNSUSPENDED"


class AuditLog(TenantScopedMixin, Base):
    """
    Audit log for tracking user actions.
    Multi-tenant: always written and read through the tenant-scoped session.
    """
    __tablename__ = 'audit_log'

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey('app_user.id'), nullable=True)
    action = Column(String(40), nullable=False, index=True)
    entity_type = Column(String(50))  # e.g., 'announcement', 'membership'
    entity_id = Column(String(32))
    details = Column(Text)  # JSON with additional details
    ip_address = Column(String(45))  # IPv4 or IPv6
    user_agent = Column(String(255))
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} by user {self.user_id} at {self.created_at}>"
