"""User model - church staff and vendor (platform) staff share one account table."""
import enum
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from werkzeug.security import generate_password_hash, check_password_hash
from faithsite.database import Base
from faithsite.models.mixins import new_id, utcnow


class PlatformRole(enum.Enum):
    """Vendor-side roles, independent of any church membership."""
    PLATFORM_ADMIN = 'PLATFORM_ADMIN'
    PLATFORM_STAFF = 'PLATFORM_STAFF'
    SALES_REP = 'SALES_REP'


class User(Base):
    """User model - email/password accounts."""

    __tablename__ = 'app_user'

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=True)
    name = Column(String(200), nullable=True)
    platform_role = Column(String(30), nullable=True)  # PlatformRole value or NULL
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    memberships = relationship('ChurchMembership', back_populates='user')
    sessions = relationship('UserSession', back_populates='user', cascade='all, delete-orphan')

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', platform_role={self.platform_role})>"
