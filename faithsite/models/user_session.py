"""UserSession model - server-side session referenced by the fi_session cookie."""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from faithsite.database import Base
from faithsite.models.mixins import new_id, utcnow


class UserSession(Base):
    """UserSession model - one row per signed-in browser."""

    __tablename__ = 'user_session'

    id = Column(String(32), primary_key=True, default=new_id)
    token = Column(String(64), nullable=False, unique=True)
    user_id = Column(String(32), ForeignKey('app_user.id'), nullable=False, index=True)
    active_church_id = Column(String(32), ForeignKey('church.id'), nullable=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    user_agent = Column(String(255), nullable=True)
    ip_address = Column(String(45), nullable=True)  # IPv4 or IPv6
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    user = relationship('User', back_populates='sessions')

    def is_expired(self, now=None):
        return self.expires_at <= (now or utcnow())

    def __repr__(self):
        return f"<UserSession(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"
