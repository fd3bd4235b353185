"""Session cookie helpers (fi_session)."""
from flask import current_app, request

SESSION_COOKIE_NAME = 'fi_session'
SECONDS_PER_DAY = 24 * 60 * 60


def session_max_age() -> int:
    """Cookie lifetime in seconds, from SESSION_DURATION_DAYS (default 7)."""
    return int(current_app.config.get('SESSION_DURATION_DAYS', 7)) * SECONDS_PER_DAY


def session_cookie_options() -> dict:
    """
    Cookie attributes shared by set and clear.

    Secure is only set in production so local http:// development keeps working.
    """
    return {
        'httponly': True,
        'secure': current_app.config.get('ENV') == 'production',
        'samesite': 'Lax',
        'path': '/',
        'domain': current_app.config.get('SESSION_COOKIE_DOMAIN') or None,
    }


def set_session_cookie(response, token: str):
    """Attach the session token to ``response``."""
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=session_max_age(),
        **session_cookie_options(),
    )
    return response


def clear_session_cookie(response):
    """Expire the session cookie on ``response``."""
    response.set_cookie(
        SESSION_COOKIE_NAME,
        '',
        max_age=0,
        expires=0,
        **session_cookie_options(),
    )
    return response


def get_session_token():
    """Raw session token from the current request, or None."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    return token or None
