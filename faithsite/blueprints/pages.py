"""
Page entry points for the admin and platform surfaces.

Rendering is handled by the front end; these routes only enforce that the
visitor is signed in (redirecting to LOGIN_URL otherwise) and hand back the
resolved context. The platform home additionally requires a platform role.
"""
from flask import Blueprint, current_app, g, jsonify

from faithsite.decorators.permissions import require_platform_user
from faithsite.middleware import require_login, require_surface
from faithsite.utils.hostname import (
    Surface, build_surface_url, hostname_config_from_app, is_localhost_hostname,
)

pages_bp = Blueprint('pages', __name__)


@pages_bp.route('/admin/dashboard')
@require_surface(Surface.ADMIN)
@require_login
def admin_dashboard():
    if g.auth.requires_church_selection:
        return jsonify({'status': 'redirect', 'redirect_to': '/select-church'})
    return jsonify({'status': 'success', 'user': g.auth.to_dict()})


@pages_bp.route('/platform')
@require_surface(Surface.PLATFORM)
@require_login
@require_platform_user
def platform_home():
    return jsonify({'status': 'success', 'user': g.auth.to_dict()})


@pages_bp.route('/select-church')
@require_surface(Surface.ADMIN)
@require_login
def select_church():
    """Where multi-church users land; the list itself comes from /api/auth/switch-church."""
    return jsonify({
        'status': 'success',
        'switch_url': build_surface_url(
            Surface.ADMIN,
            '/api/auth/switch-church',
            is_local=g.surface.is_local,
            config=hostname_config_from_app(current_app.config),
            use_localhost=is_localhost_hostname(g.surface.original_host),
        ),
    })
