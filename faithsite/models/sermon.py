"""Sermon model."""
from sqlalchemy import Column, String, Text, Date
from faithsite.database import Base
from faithsite.models.mixins import TenantScopedMixin, new_id
from faithsite.models.content import PublishableMixin


class Sermon(TenantScopedMixin, PublishableMixin, Base):
    """Sermon model - a recorded message with optional media links."""

    __tablename__ = 'sermon'

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    date = Column(Date, nullable=True)
    speaker_name = Column(String(200), nullable=True)
    scripture = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    video_url = Column(String(500), nullable=True)
    audio_url = Column(String(500), nullable=True)

    def __repr__(self):
        return f"<Sermon(id={self.id}, church_id={self.church_id}, title='{self.title}')>"
