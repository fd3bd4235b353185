"""Lead model - platform CRM prospects worked by the sales team."""
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from faithsite.database import Base
from faithsite.models.mixins import new_id, utcnow


class LeadStatus(enum.Enum):
    """Sales pipeline stage."""
    NEW = 'NEW'
    CONTACTED = 'CONTACTED'
    QUALIFIED = 'QUALIFIED'
    WON = 'WON'
    LOST = 'LOST'


class Lead(Base):
    """Lead model. Owner is a SALES_REP or PLATFORM_ADMIN user, or unassigned."""

    __tablename__ = 'lead'

    id = Column(String(32), primary_key=True, default=new_id)
    church_name = Column(String(200), nullable=False)
    contact_name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=LeadStatus.NEW.value)
    notes = Column(Text, nullable=True)
    owner_user_id = Column(String(32), ForeignKey('app_user.id'), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    owner = relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'church_name': self.church_name,
            'contact_name': self.contact_name,
            'email': self.email,
            'status': self.status,
            'notes': self.notes,
            'owner_user_id': self.owner_user_id,
        }

    def __repr__(self):
        return f"<Lead(id={self.id}, church_name='{self.church_name}', owner={self.owner_user_id})>"
