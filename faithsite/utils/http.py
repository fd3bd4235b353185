"""Request helpers: client IP, request ids and redirect-target validation."""
import secrets
import time
from typing import Optional

from flask import request

REQUEST_ID_HEADER = 'X-Request-ID'

_BASE36 = '0123456789abcdefghijklmnopqrstuvwxyz'


def _base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return ''.join(reversed(digits))


def generate_request_id() -> str:
    """``req_<base36 millis>_<random>``."""
    return f"req_{_base36(int(time.time() * 1000))}_{secrets.token_hex(4)}"


def get_request_id() -> str:
    """Reuse an upstream X-Request-ID when it looks sane, else mint one."""
    incoming = (request.headers.get(REQUEST_ID_HEADER) or '').strip()
    if incoming and len(incoming) <= 128 and incoming.isprintable():
        return incoming
    return generate_request_id()


def get_client_ip() -> Optional[str]:
    """
    Best-effort client IP.

    Order: CF-Connecting-IP, first hop of X-Forwarded-For, X-Real-IP, socket address.
    """
    cf_ip = request.headers.get('CF-Connecting-IP')
    if cf_ip:
        return cf_ip.strip()

    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        first = forwarded.split(',')[0].strip()
        if first:
            return first

    real_ip = request.headers.get('X-Real-IP')
    if real_ip:
        return real_ip.strip()

    return request.remote_addr


def get_user_agent() -> Optional[str]:
    user_agent = request.headers.get('User-Agent')
    return user_agent[:255] if user_agent else None


def is_safe_return_to(target) -> bool:
    """Only same-site relative paths: '/x' but never '//host', 'http://', or backslashes."""
    if not target or not isinstance(target, str):
        return False
    if not target.startswith('/') or target.startswith('//'):
        return False
    if '://' in target or '\\' in target:
        return False
    return True
