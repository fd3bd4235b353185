"""Models package - exports all SQLAlchemy models."""
# Tenancy and identity
from faithsite.models.mixins import TenantScopedMixin, is_tenant_scoped, new_id, utcnow
from faithsite.models.church import Church, ChurchStatus
from faithsite.models.app_user import User, PlatformRole
from faithsite.models.membership import ChurchMembership, UserRole
from faithsite.models.user_session import UserSession
from faithsite.models.login_attempt import LoginAttempt
from faithsite.models.user_invite import UserInvite

# Church content
from faithsite.models.content import ContentStatus
from faithsite.models.announcement import Announcement
from faithsite.models.sermon import Sermon
from faithsite.models.page import Page
from faithsite.models.contact_submission import ContactSubmission
from faithsite.models.audit_log import AuditLog, AuditAction

# Vendor side
from faithsite.models.lead import Lead, LeadStatus
from faithsite.models.consultation_request import ConsultationRequest

__all__ = [
    'TenantScopedMixin', 'is_tenant_scoped', 'new_id', 'utcnow',
    'Church', 'ChurchStatus', 'User', 'PlatformRole',
    'ChurchMembership', 'UserRole', 'UserSession', 'LoginAttempt', 'UserInvite',
    'ContentStatus', 'Announcement', 'Sermon', 'Page', 'ContactSubmission',
    'AuditLog', 'AuditAction',
    'Lead', 'LeadStatus', 'ConsultationRequest',
]

# Every model whose rows belong to exactly one church
TENANT_SCOPED_MODELS = (
    ChurchMembership, UserInvite, Announcement, Sermon, Page, ContactSubmission, AuditLog,
)
