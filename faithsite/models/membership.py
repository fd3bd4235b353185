"""ChurchMembership model - links users to churches with a role."""
import enum
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from faithsite.database import Base
from faithsite.models.mixins import TenantScopedMixin, new_id, utcnow


class UserRole(enum.Enum):
    """User roles within a church."""
    ADMIN = 'ADMIN'
    EDITOR = 'EDITOR'
    VIEWER = 'VIEWER'


class ChurchMembership(TenantScopedMixin, Base):
    """ChurchMembership model - a user's role inside one church."""

    __tablename__ = 'church_membership'
    __table_args__ = (
        UniqueConstraint('user_id', 'church_id', name='uq_membership_user_church'),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey('app_user.id'), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=UserRole.VIEWER.value)
    is_primary = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship('User', back_populates='memberships')
    church = relationship('Church', back_populates='memberships')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'email': self.user.email if self.user else None,
            'name': self.user.name if self.user else None,
            'role': self.role,
            'is_primary': self.is_primary,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f"<ChurchMembership(user_id={self.user_id}, church_id={self.church_id}, role='{self.role}')>"
