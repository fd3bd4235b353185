"""ConsultationRequest model - leads captured on the vendor marketing site."""
from sqlalchemy import Column, String, Text, DateTime
from faithsite.database import Base
from faithsite.models.mixins import new_id, utcnow


class ConsultationRequest(Base):
    """Marketing-site consultation request (not tenant data)."""

    __tablename__ = 'consultation_request'

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    church_name = Column(String(200), nullable=True)
    message = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<ConsultationRequest(id={self.id}, email='{self.email}')>"
