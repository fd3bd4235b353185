"""Church model - the tenant. Each church owns its site, team and content."""
import enum
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from faithsite.database import Base
from faithsite.models.mixins import new_id, utcnow


class ChurchStatus(enum.Enum):
    """Lifecycle status of a church account."""
    ACTIVE = 'ACTIVE'
    SUSPENDED = 'SUSPENDED'


class Church(Base):
    """Church model - each tenant organization."""

    __tablename__ = 'church'

    id = Column(String(32), primary_key=True, default=new_id)
    slug = Column(String(80), nullable=False, unique=True)  # Subdomain: <slug>.faith-interactive.com
    name = Column(String(200), nullable=False)
    custom_domain = Column(String(255), nullable=True, unique=True)  # e.g. www.gracechurch.org
    primary_contact_email = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=ChurchStatus.ACTIVE.value)
    deleted_at = Column(DateTime, nullable=True)  # Soft delete
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    memberships = relationship('ChurchMembership', back_populates='church')

    @property
    def is_active(self):
        """A church resolves for requests only while ACTIVE and not deleted."""
        return self.status == ChurchStatus.ACTIVE.value and self.deleted_at is None

    def suspend(self):
        self.status = ChurchStatus.SUSPENDED.value

    def unsuspend(self):
        self.status = ChurchStatus.ACTIVE.value

    def to_dict(self):
        return {
            'id': self.id,
            'slug': self.slug,
            'name': self.name,
            'status': self.status,
            'primary_contact_email': self.primary_contact_email,
        }

    def __repr__(self):
        return f"<Church(id={self.id}, slug='{self.slug}', status='{self.status}')>"
