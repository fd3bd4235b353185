"""
Platform CRM lead access rules.

- PLATFORM_ADMIN sees and edits every lead and may reassign owners
- SALES_REP sees leads they own plus unassigned ones; new leads are theirs
- everyone else sees nothing

A lead outside the caller's visibility is reported as not found.
"""
import logging
from typing import Optional

from sqlalchemy import false, or_

from faithsite.decorators.permissions import has_crm_access, is_platform_admin
from faithsite.exceptions import ForbiddenError, NotFoundError, ValidationFailedError
from faithsite.models import Lead, LeadStatus, PlatformRole, User

logger = logging.getLogger(__name__)


def can_access_lead(platform_role, user_id: str, lead: Lead) -> bool:
    if is_platform_admin(platform_role):
        return True
    if not has_crm_access(platform_role):
        return False
    return lead.owner_user_id is None or lead.owner_user_id == user_id


def can_reassign_lead_owner(platform_role) -> bool:
    return is_platform_admin(platform_role)


def lead_owner_for_create(platform_role, user_id: str, requested_owner_id: Optional[str]) -> Optional[str]:
    """Admins choose (or leave unassigned); reps always own what they create."""
    if is_platform_admin(platform_role):
        return requested_owner_id or None
    return user_id


def lead_visibility_criteria(platform_role, user_id: str):
    """SQL criteria limiting a lead query to what the caller may see."""
    if is_platform_admin(platform_role):
        return []
    if has_crm_access(platform_role):
        return [or_(Lead.owner_user_id == user_id, Lead.owner_user_id.is_(None))]
    return [false()]


def list_leads(session, auth, status: Optional[str] = None):
    query = session.query(Lead).filter(*lead_visibility_criteria(auth.platform_role, auth.user_id))
    if status:
        query = query.filter(Lead.status == status)
    return query.order_by(Lead.created_at.desc()).all()


def get_lead_or_404(session, auth, lead_id: str) -> Lead:
    lead = session.get(Lead, lead_id) if lead_id else None
    if lead is None or not can_access_lead(auth.platform_role, auth.user_id, lead):
        raise NotFoundError("Lead not found")
    return lead


def _validate_owner(session, owner_user_id: Optional[str]):
    if owner_user_id is None:
        return
    owner = session.get(User, owner_user_id)
    if owner is None or owner.platform_role not in (
        PlatformRole.PLATFORM_ADMIN.value, PlatformRole.SALES_REP.value
    ):
        raise ValidationFailedError({'owner_user_id': ['Owner must be a sales user']})


def create_lead(session, auth, data: dict) -> Lead:
    """Create a lead owned according to the caller's role. Caller commits."""
    owner_id = lead_owner_for_create(auth.platform_role, auth.user_id, data.get('owner_user_id'))
    _validate_owner(session, owner_id)

    lead = Lead(
        church_name=data['church_name'],
        contact_name=data.get('contact_name'),
        email=data.get('email'),
        notes=data.get('notes'),
        status=data.get('status') or LeadStatus.NEW.value,
        owner_user_id=owner_id,
    )
    session.add(lead)
    session.flush()
    logger.info(f"Lead {lead.id} created by {auth.user_id} (owner={owner_id})")
    return lead


def update_lead(session, auth, lead: Lead, data: dict) -> Lead:
    """Apply ``data`` to ``lead``; owner changes are admin-only."""
    if 'owner_user_id' in data and data['owner_user_id'] != lead.owner_user_id:
        if not can_reassign_lead_owner(auth.platform_role):
            raise ForbiddenError("Only platform admins can reassign leads")
        _validate_owner(session, data['owner_user_id'])
        lead.owner_user_id = data['owner_user_id']

    for field in ('church_name', 'contact_name', 'email', 'notes', 'status'):
        if data.get(field) is not None:
            setattr(lead, field, data[field])
    return lead
