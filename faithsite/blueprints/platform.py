"""Vendor platform API: church administration and the sales CRM (platform surface)."""
from flask import Blueprint, g, jsonify, request

from faithsite.database import get_session
from faithsite.decorators.permissions import (
    require_crm_user, require_platform_admin, require_platform_staff,
)
from faithsite.forms.api_forms import (
    ChurchForm, LeadForm, LeadUpdateForm, submitted_data, validate_json_form,
)
from faithsite.middleware import require_auth, restrict_to_surfaces
from faithsite.models import AuditAction
from faithsite.services import church_service, crm_service
from faithsite.services.audit_service import log_action
from faithsite.tenant_session import get_tenant_session
from faithsite.utils.hostname import Surface

platform_bp = Blueprint('platform', __name__, url_prefix='/api/platform')
restrict_to_surfaces(platform_bp, Surface.PLATFORM)


# Churches

@platform_bp.route('/churches', methods=['GET'])
@require_auth
@require_platform_staff
def list_churches():
    churches = church_service.list_churches(get_session())
    return jsonify({'status': 'success', 'churches': [c.to_dict() for c in churches]})


@platform_bp.route('/churches', methods=['POST'])
@require_auth
@require_platform_admin
def create_church():
    form = validate_json_form(ChurchForm)
    db_session = get_session()

    church = church_service.create_church(
        db_session, form.slug.data, form.name.data, form.primary_contact_email.data or None
    )
    db_session.commit()
    return jsonify({'status': 'success', 'church': church.to_dict()}), 201


def _set_church_status(church_id, suspend):
    db_session = get_session()
    church = church_service.get_church_or_404(db_session, church_id)

    if suspend:
        church_service.suspend_church(db_session, church)
        action = AuditAction.CHURCH_SUSPENDED
    else:
        church_service.unsuspend_church(db_session, church)
        action = AuditAction.CHURCH_UNSUSPENDED

    tenant_db = get_tenant_session(church.id, db_session)
    log_action(tenant_db, action, 'church', church.id)
    tenant_db.commit()
    return jsonify({'status': 'success', 'church': church.to_dict()})


@platform_bp.route('/churches/<church_id>/suspend', methods=['POST'])
@require_auth
@require_platform_admin
def suspend_church(church_id):
    return _set_church_status(church_id, suspend=True)


@platform_bp.route('/churches/<church_id>/unsuspend', methods=['POST'])
@require_auth
@require_platform_admin
def unsuspend_church(church_id):
    return _set_church_status(church_id, suspend=False)


# CRM leads

@platform_bp.route('/leads', methods=['GET'])
@require_auth
@require_crm_user
def list_leads():
    status = request.args.get('status', '').strip().upper() or None
    leads = crm_service.list_leads(get_session(), g.auth, status)
    return jsonify({'status': 'success', 'leads': [lead.to_dict() for lead in leads]})


@platform_bp.route('/leads', methods=['POST'])
@require_auth
@require_crm_user
def create_lead():
    form = validate_json_form(LeadForm)
    db_session = get_session()

    data = submitted_data(form)
    if 'owner_user_id' in data:
        data['owner_user_id'] = data['owner_user_id'] or None
    lead = crm_service.create_lead(db_session, g.auth, data)
    db_session.commit()
    return jsonify({'status': 'success', 'lead': lead.to_dict()}), 201


@platform_bp.route('/leads/<lead_id>', methods=['GET'])
@require_auth
@require_crm_user
def get_lead(lead_id):
    lead = crm_service.get_lead_or_404(get_session(), g.auth, lead_id)
    return jsonify({'status': 'success', 'lead': lead.to_dict()})


@platform_bp.route('/leads/<lead_id>', methods=['PATCH'])
@require_auth
@require_crm_user
def update_lead(lead_id):
    db_session = get_session()
    lead = crm_service.get_lead_or_404(db_session, g.auth, lead_id)
    form = validate_json_form(LeadUpdateForm)

    data = submitted_data(form)
    if 'owner_user_id' in data:
        data['owner_user_id'] = data['owner_user_id'] or None
    crm_service.update_lead(db_session, g.auth, lead, data)
    db_session.commit()
    return jsonify({'status': 'success', 'lead': lead.to_dict()})
