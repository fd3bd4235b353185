"""ContactSubmission model - messages sent through a church's public contact form."""
from sqlalchemy import Column, String, Text, DateTime
from faithsite.database import Base
from faithsite.models.mixins import TenantScopedMixin, new_id, utcnow


class ContactSubmission(TenantScopedMixin, Base):
    """ContactSubmission model."""

    __tablename__ = 'contact_submission'

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<ContactSubmission(id={self.id}, church_id={self.church_id}, email='{self.email}')>"
