"""Publishing workflow shared by church content (announcements, sermons, pages)."""
import enum
from sqlalchemy import Column, String, DateTime
from faithsite.models.mixins import utcnow


class ContentStatus(enum.Enum):
    """Publication state of a content item."""
    DRAFT = 'DRAFT'
    PUBLISHED = 'PUBLISHED'


class PublishableMixin:
    """Adds status/published_at plus publish and unpublish transitions."""

    status = Column(String(20), nullable=False, default=ContentStatus.DRAFT.value)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_published(self):
        return self.status == ContentStatus.PUBLISHED.value

    def publish(self):
        self.status = ContentStatus.PUBLISHED.value
        if self.published_at is None:
            self.published_at = utcnow()

    def unpublish(self):
        self.status = ContentStatus.DRAFT.value
