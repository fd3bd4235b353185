"""Authentication API: unified login, logout, current user, church switching and invite acceptance."""
import logging

from flask import Blueprint, current_app, g, jsonify

from faithsite.database import get_session
from faithsite.exceptions import ForbiddenError, NotFoundError
from faithsite.forms.api_forms import AcceptInviteForm, LoginForm, SwitchChurchForm, validate_json_form
from faithsite.middleware import require_auth
from faithsite.models import AuditAction, Church, UserSession
from faithsite.services import invite_service, session_service
from faithsite.services.audit_service import log_action
from faithsite.services.auth_service import authenticate, list_switchable_churches
from faithsite.services.lockout_service import LockoutPolicy
from faithsite.tenant_session import get_tenant_session
from faithsite.utils.cookies import clear_session_cookie, get_session_token, set_session_cookie
from faithsite.utils.http import get_client_ip, get_user_agent

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    """Sign in with email and password; sets the fi_session cookie."""
    form = validate_json_form(LoginForm)
    db_session = get_session()

    result = authenticate(
        db_session,
        form.email.data,
        form.password.data,
        ip_address=get_client_ip(),
        user_agent=get_user_agent(),
        return_to=form.return_to.data,
        lockout_policy=LockoutPolicy.from_config(current_app.config),
        duration_days=current_app.config.get('SESSION_DURATION_DAYS', 7),
    )

    if result.church_id:
        tenant_db = get_tenant_session(result.church_id, db_session)
        log_action(tenant_db, AuditAction.LOGIN_SUCCESS, 'user', result.user.id, user_id=result.user.id)
        tenant_db.commit()

    response = jsonify({
        'status': 'success',
        'redirect_to': result.redirect_to,
        'requires_church_selection': result.requires_church_selection,
        'user': {
            'id': result.user.id,
            'email': result.user.email,
            'name': result.user.name,
            'platform_role': result.user.platform_role,
        },
    })
    return set_session_cookie(response, result.token)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Delete the server-side session (if any) and always clear the cookie."""
    token = get_session_token()
    auth = g.get('auth')

    if auth is not None and auth.church_id:
        tenant_db = get_tenant_session(auth.church_id)
        log_action(tenant_db, AuditAction.LOGOUT, 'user', auth.user_id)
        tenant_db.commit()

    if token:
        session_service.delete_session(get_session(), token)

    response = jsonify({'status': 'success'})
    return clear_session_cookie(response)


@auth_bp.route('/me', methods=['GET'])
@require_auth
def me():
    """Current user and resolved church."""
    return jsonify({'status': 'success', 'user': g.auth.to_dict()})


@auth_bp.route('/switch-church', methods=['GET'])
@require_auth
def list_churches():
    """Churches the current user can switch to."""
    churches = list_switchable_churches(get_session(), g.auth)
    return jsonify({
        'status': 'success',
        'churches': churches,
        'current_church_id': g.auth.church_id,
    })


@auth_bp.route('/switch-church', methods=['POST'])
@require_auth
def switch_church():
    """Make another church active for this session."""
    form = validate_json_form(SwitchChurchForm)
    db_session = get_session()

    church = db_session.get(Church, form.church_id.data)
    if church is None or not church.is_active:
        raise NotFoundError("Church not found")

    user_session = db_session.get(UserSession, g.auth.session_id)
    if user_session is None or not session_service.switch_active_church(db_session, user_session, church):
        raise ForbiddenError("You do not have access to this church")

    tenant_db = get_tenant_session(church.id, db_session)
    log_action(tenant_db, AuditAction.CHURCH_SWITCHED, 'church', church.id)
    tenant_db.commit()

    return jsonify({
        'status': 'success',
        'church': {'id': church.id, 'slug': church.slug, 'name': church.name},
    })


@auth_bp.route('/accept-invite', methods=['POST'])
def accept_invite():
    """Redeem a team invite; new emails get an account, existing ones confirm their password."""
    form = validate_json_form(AcceptInviteForm)

    user, membership = invite_service.accept_invite(
        get_session(), form.token.data.strip(), form.name.data, form.password.data,
    )

    return jsonify({
        'status': 'success',
        'message': 'Invite accepted. You can now log in.',
        'user': {'id': user.id, 'email': user.email, 'name': user.name},
        'church_id': membership.church_id,
        'role': membership.role,
    })
