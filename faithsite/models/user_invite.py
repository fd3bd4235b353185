"""UserInvite model - pending invitation for an email address to join a church."""
from sqlalchemy import Column, String, DateTime, ForeignKey
from faithsite.database import Base
from faithsite.models.membership import UserRole
from faithsite.models.mixins import TenantScopedMixin, new_id, utcnow


class UserInvite(TenantScopedMixin, Base):
    """UserInvite model - single-use token that turns into a membership."""

    __tablename__ = 'user_invite'

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=UserRole.VIEWER.value)
    token = Column(String(64), nullable=False, unique=True)
    expires_at = Column(DateTime, nullable=False)
    invited_by_id = Column(String(32), ForeignKey('app_user.id'), nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def is_expired(self, now=None):
        return self.expires_at <= (now or utcnow())

    @property
    def is_pending(self):
        return self.accepted_at is None and not self.is_expired()

    def to_dict(self):
        # Never serialise the token
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'accepted_at': self.accepted_at.isoformat() if self.accepted_at else None,
        }

    def __repr__(self):
        return f"<UserInvite(email='{self.email}', church_id={self.church_id}, role='{self.role}')>"
