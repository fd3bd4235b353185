"""Rate-limit decorator for public endpoints."""
from functools import wraps

from flask import g, make_response

from faithsite.exceptions import RateLimitedError
from faithsite.services.rate_limit_service import (
    DEFAULT_POLICY, get_rate_limit_headers, get_rate_limiter,
)
from faithsite.utils.http import get_client_ip


def rate_limit(route, policy=DEFAULT_POLICY, key_func=None):
    """
    Decorator: count the request against ``policy`` before running the view.

    The limiter key is the client IP plus ``route`` (or ``key_func()`` when
    given, e.g. to add the church id). Rate-limit headers are attached to the
    response, including the 429.

    Usage:
        @rate_limit('/api/contact', PUBLIC_FORM_POLICY)
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            limiter_route = key_func() if key_func else route
            result = get_rate_limiter().check_policy(get_client_ip(), limiter_route, policy)
            g.rate_limit_result = result
            g.rate_limit_route = route

            if not result.allowed:
                raise RateLimitedError(result)

            response = make_response(f(*args, **kwargs))
            response.headers.update(get_rate_limit_headers(result))
            return response
        return decorated_function
    return decorator
