"""Page model - a public page on a church site."""
from sqlalchemy import Column, String, Boolean, UniqueConstraint
from faithsite.database import Base
from faithsite.models.mixins import TenantScopedMixin, new_id
from faithsite.models.content import PublishableMixin


class Page(TenantScopedMixin, PublishableMixin, Base):
    """Page model. Block content lives outside this layer."""

    __tablename__ = 'page'
    __table_args__ = (
        UniqueConstraint('church_id', 'url_path', name='uq_page_church_path'),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    url_path = Column(String(255), nullable=True)
    is_home_page = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<Page(id={self.id}, church_id={self.church_id}, url_path='{self.url_path}')>"
