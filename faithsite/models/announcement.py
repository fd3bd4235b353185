"""Announcement model - short notices shown on a church's public site."""
from sqlalchemy import Column, String, Text, DateTime
from faithsite.database import Base
from faithsite.models.mixins import TenantScopedMixin, new_id, utcnow
from faithsite.models.content import PublishableMixin


class Announcement(TenantScopedMixin, PublishableMixin, Base):
    """Announcement model."""

    __tablename__ = 'announcement'

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False, default='')
    expires_at = Column(DateTime, nullable=True)

    def is_expired(self, now=None):
        return self.expires_at is not None and self.expires_at <= (now or utcnow())

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'body': self.body,
            'status': self.status,
            'published_at': self.published_at.isoformat() if self.published_at else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
        }

    def __repr__(self):
        return f"<Announcement(id={self.id}, church_id={self.church_id}, title='{self.title}')>"
