"""Church (tenant) lookup and lifecycle operations used by the platform surface."""
import logging
from typing import Optional

from faithsite.exceptions import NotFoundError, ValidationFailedError
from faithsite.models import Church, utcnow
from faithsite.utils.hostname import Surface, is_reserved_slug, is_valid_slug, normalize_hostname

logger = logging.getLogger(__name__)


def get_church_by_slug(session, slug: Optional[str]) -> Optional[Church]:
    """Live church for a subdomain slug; suspended and deleted churches do not resolve."""
    if not slug:
        return None
    church = session.query(Church).filter(
        Church.slug == slug.lower(),
        Church.deleted_at.is_(None),
    ).first()
    if church is None or not church.is_active:
        return None
    return church


def get_church_by_domain(session, hostname: Optional[str]) -> Optional[Church]:
    """Live church serving a custom domain."""
    if not hostname:
        return None
    church = session.query(Church).filter(
        Church.custom_domain == hostname.lower(),
        Church.deleted_at.is_(None),
    ).first()
    if church is None or not church.is_active:
        return None
    return church


def resolve_public_church(session, parsed) -> Optional[Church]:
    """Church whose public site a tenant-surface request is for."""
    if parsed.surface is not Surface.TENANT:
        return None
    if parsed.church_slug:
        return get_church_by_slug(session, parsed.church_slug)
    return get_church_by_domain(session, normalize_hostname(parsed.original_host))


def get_church_or_404(session, church_id: str) -> Church:
    church = session.get(Church, church_id) if church_id else None
    if church is None or church.deleted_at is not None:
        raise NotFoundError("Church not found")
    return church


def list_churches(session, include_deleted: bool = False):
    query = session.query(Church)
    if not include_deleted:
        query = query.filter(Church.deleted_at.is_(None))
    return query.order_by(Church.name.asc()).all()


def create_church(session, slug: str, name: str, primary_contact_email: Optional[str] = None) -> Church:
    """Create a church after validating its slug. Caller commits."""
    slug = (slug or '').strip().lower()
    errors = {}
    if is_reserved_slug(slug):
        errors['slug'] = ['This slug is reserved']
    elif not is_valid_slug(slug):
        errors['slug'] = ['Use lowercase letters, numbers and hyphens']
    elif session.query(Church).filter(Church.slug == slug).first() is not None:
        errors['slug'] = ['This slug is already taken']
    if errors:
        raise ValidationFailedError(errors)

    church = Church(slug=slug, name=name.strip(), primary_contact_email=primary_contact_email)
    session.add(church)
    session.flush()
    logger.info(f"Church created: {church.slug} ({church.id})")
    return church


def suspend_church(session, church: Church) -> Church:
    church.suspend()
    church.updated_at = utcnow()
    logger.warning(f"Church suspended: {church.slug} ({church.id})")
    return church


def unsuspend_church(session, church: Church) -> Church:
    church.unsuspend()
    church.updated_at = utcnow()
    logger.info(f"Church reactivated: {church.slug} ({church.id})")
    return church
