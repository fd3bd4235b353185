"""Middleware for request context, surface routing and authentication."""
import logging
from functools import wraps
from urllib.parse import urlencode

from flask import current_app, g, redirect, request
from sqlalchemy.exc import SQLAlchemyError

from faithsite.database import get_session
from faithsite.exceptions import NotFoundError, UnauthenticatedError
from faithsite.logging_config import describe_error
from faithsite.services.auth_service import get_auth_context
from faithsite.services.church_service import resolve_public_church
from faithsite.utils.cookies import get_session_token
from faithsite.utils.hostname import Surface, hostname_config_from_app, parse_hostname
from faithsite.utils.http import get_request_id

logger = logging.getLogger(__name__)


def load_request_context():
    """
    Populate ``g`` for the current request.

    Sets g.request_id, g.surface (ParsedHostname), g.church (public church for
    the tenant surface, or None) and g.auth (AuthContext or None). The auth
    context only ever comes from the session cookie lookup.
    """
    g.request_id = get_request_id()
    g.surface = parse_hostname(request.host, hostname_config_from_app(current_app.config))
    g.church = None
    g.auth = None

    db_session = get_session()
    try:
        if g.surface.surface is Surface.TENANT:
            g.church = resolve_public_church(db_session, g.surface)

        token = get_session_token()
        if token:
            g.auth = get_auth_context(db_session, token)
    except SQLAlchemyError as e:
        # Fail closed: the request continues unauthenticated
        db_session.rollback()
        logger.error(f"Error loading request context: {describe_error(e)}")


def current_surface():
    return g.surface.surface


def restrict_to_surfaces(blueprint, *surfaces):
    """Make every route of ``blueprint`` 404 outside the given surfaces."""
    allowed = {Surface(surface) for surface in surfaces}

    @blueprint.before_request
    def _check_surface():
        if current_surface() not in allowed:
            raise NotFoundError("Not Found")

    return blueprint


def require_surface(*surfaces):
    """Decorator: route only exists on the given surfaces (404 elsewhere)."""
    allowed = {Surface(surface) for surface in surfaces}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if current_surface() not in allowed:
                raise NotFoundError("Not Found")
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_auth(f):
    """
    Decorator: API routes. Raises UnauthenticatedError (401) without a session.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('auth') is None:
            raise UnauthenticatedError()
        return f(*args, **kwargs)
    return decorated_function


def login_redirect_url():
    """LOGIN_URL with a returnTo pointing back at the current path."""
    login_url = current_app.config.get('LOGIN_URL', '/login')
    return_to = request.full_path.rstrip('?')
    return f"{login_url}?{urlencode({'returnTo': return_to})}"


def require_login(f):
    """
    Decorator: page routes. Redirects to LOGIN_URL when not signed in.

    Sets returnTo so the login page can send the user back afterwards.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('auth') is None:
            return redirect(login_redirect_url())
        return f(*args, **kwargs)
    return decorated_function
