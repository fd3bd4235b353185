"""Church team management API (admin surface)."""
from flask import Blueprint, current_app, g, jsonify

from faithsite.database import get_session
from faithsite.decorators.permissions import Permission, get_role_label, require_permission
from faithsite.exceptions import ForbiddenError
from faithsite.forms.api_forms import InviteForm, MembershipRoleForm, submitted_data, validate_json_form
from faithsite.middleware import require_auth, restrict_to_surfaces
from faithsite.models import AuditAction, ChurchMembership
from faithsite.services import invite_service, session_service
from faithsite.services.audit_service import log_action
from faithsite.tenant_session import get_tenant_session
from faithsite.utils.hostname import Surface, build_surface_url, hostname_config_from_app, is_localhost_hostname

team_bp = Blueprint('team', __name__, url_prefix='/api/team')
restrict_to_surfaces(team_bp, Surface.ADMIN)


def _membership_json(membership):
    data = membership.to_dict()
    data['role_label'] = get_role_label(membership.role)
    return data


def _get_other_membership(db, membership_id):
    """Membership in this church that isn't the caller's own."""
    membership = db.get_or_404(ChurchMembership, membership_id)
    if membership.user_id == g.auth.user_id:
        raise ForbiddenError("You cannot change your own membership")
    return membership


def _accept_invite_url(token):
    return build_surface_url(
        Surface.ADMIN,
        f'/accept-invite?token={token}',
        is_local=g.surface.is_local,
        config=hostname_config_from_app(current_app.config),
        use_localhost=is_localhost_hostname(g.surface.original_host),
    )


@team_bp.route('', methods=['GET'])
@require_auth
@require_permission(Permission.TEAM_READ)
def list_members():
    db = get_tenant_session(g.auth.church_id)
    memberships = db.query(ChurchMembership).order_by(ChurchMembership.created_at.asc()).all()
    return jsonify({
        'status': 'success',
        'members': [_membership_json(m) for m in memberships],
        'invites': [invite.to_dict() for invite in invite_service.list_pending_invites(db)],
    })


@team_bp.route('', methods=['POST'])
@require_auth
@require_permission(Permission.TEAM_INVITE)
def invite_member():
    """Invite an email address into this church with a role."""
    form = validate_json_form(InviteForm)
    db = get_tenant_session(g.auth.church_id)

    invite = invite_service.create_invite(db, form.email.data, form.role.data, invited_by_id=g.auth.user_id)
    db.commit()

    body = {'status': 'success', 'invite': invite.to_dict()}
    if current_app.config.get('ENV') != 'production':
        # No mail delivery here; outside production hand the link back for testing
        body['invite_url'] = _accept_invite_url(invite.token)
    return jsonify(body), 201


@team_bp.route('/<membership_id>', methods=['PATCH'])
@require_auth
@require_permission(Permission.TEAM_EDIT)
def update_member(membership_id):
    """Change a member's role (and optionally primary flag)."""
    db = get_tenant_session(g.auth.church_id)
    membership = _get_other_membership(db, membership_id)
    form = validate_json_form(MembershipRoleForm)
    data = submitted_data(form)

    old_role = membership.role
    membership.role = form.role.data
    if 'is_primary' in data:
        membership.is_primary = bool(data['is_primary'])

    if old_role != membership.role:
        log_action(db, AuditAction.USER_ROLE_CHANGED, 'membership', membership.id,
                   details={'user_id': membership.user_id, 'from': old_role, 'to': membership.role})
    db.commit()

    return jsonify({'status': 'success', 'member': _membership_json(membership)})


@team_bp.route('/<membership_id>/deactivate', methods=['POST'])
@require_auth
@require_permission(Permission.TEAM_DEACTIVATE)
def deactivate_member(membership_id):
    """Remove a member's access to this church and end their sessions in it."""
    db = get_tenant_session(g.auth.church_id)
    membership = _get_other_membership(db, membership_id)

    membership.is_active = False
    session_service.delete_all_user_sessions(get_session(), membership.user_id, g.auth.church_id)
    log_action(db, AuditAction.USER_DEACTIVATED, 'membership', membership.id,
               details={'user_id': membership.user_id})
    db.commit()

    return jsonify({'status': 'success', 'member': _membership_json(membership)})
