"""LoginAttempt model - feeds account lockout decisions."""
from sqlalchemy import Column, String, Boolean, DateTime
from faithsite.database import Base
from faithsite.models.mixins import new_id, utcnow


class LoginAttempt(Base):
    """One row per login attempt, successful or not."""

    __tablename__ = 'login_attempt'

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, index=True)
    ip_address = Column(String(45), nullable=True, index=True)
    user_agent = Column(String(255), nullable=True)
    success = Column(Boolean, nullable=False, default=False)
    fail_reason = Column(String(40), nullable=True)  # invalid_password, user_not_found, ...
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<LoginAttempt(email='{self.email}', success={self.success}, at={self.created_at})>"
