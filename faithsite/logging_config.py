"""
Logging setup.

Standard library logging with two filters attached to the root handler:

- RequestContextFilter stamps request_id / church_id / path on every record
- RedactingFilter masks sensitive values passed as dict arguments, then
  scrubs the final message and traceback (SQL parameters, key=value secrets)
"""
import logging
import re
import sys

from flask import g, has_request_context, request

REDACTED = '[REDACTED]'

# Matched as case-insensitive substrings of the key (api_key, apiKey, x-api-key ...)
SENSITIVE_KEYS = (
    'password', 'passwordhash', 'password_hash', 'token', 'secret',
    'apikey', 'api_key', 'api-key', 'authorization', 'cookie', 'jwt',
    'accesstoken', 'refreshtoken', 'creditcard', 'credit_card', 'ssn', 'fi_session',
)

# SQLAlchemy appends "[parameters: ...]" to DBAPI error text
SQL_PARAMETERS = re.compile(r'\[parameters: [^\n]*\]')
SENSITIVE_ASSIGNMENT = re.compile(
    r'(?i)\b([\w-]*(?:password|token|secret|api[_-]?key|authorization|cookie|jwt|fi_session)[\w-]*)'
    r'(["\']?\s*[=:]\s*["\']?)([^\s,;&"\']+)'
)

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s'


def is_sensitive_key(key) -> bool:
    if not isinstance(key, str):
        return False
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def redact(value, _seen=None):
    """Deep copy of ``value`` with sensitive keys replaced by ``[REDACTED]``."""
    if _seen is None:
        _seen = set()

    if isinstance(value, dict):
        if id(value) in _seen:
            return '[Circular]'
        _seen.add(id(value))
        result = {
            k: REDACTED if is_sensitive_key(k) else redact(v, _seen)
            for k, v in value.items()
        }
        _seen.discard(id(value))
        return result

    if isinstance(value, (list, tuple)):
        if id(value) in _seen:
            return '[Circular]'
        _seen.add(id(value))
        result = [redact(item, _seen) for item in value]
        _seen.discard(id(value))
        return type(value)(result) if isinstance(value, tuple) else result

    return value


def redact_text(text):
    """Mask SQL bound parameters and ``key=value`` style secrets in a formatted string."""
    if not text:
        return text
    text = SQL_PARAMETERS.sub(f'[parameters: {REDACTED}]', text)
    return SENSITIVE_ASSIGNMENT.sub(lambda m: f'{m.group(1)}{m.group(2)}{REDACTED}', text)


def describe_error(error) -> str:
    """Loggable text for an exception (DB errors carry their bound parameters)."""
    return redact_text(f"{type(error).__name__}: {error}")


_traceback_formatter = logging.Formatter()


class RedactingFilter(logging.Filter):
    """
    Redact dict arguments (``logger.info("login %s", payload)``), then scrub
    the rendered message and any traceback before the handler formats them.
    """

    def filter(self, record):
        if isinstance(record.args, dict):
            record.args = redact(record.args)
        elif isinstance(record.args, tuple) and record.args:
            record.args = tuple(redact(arg) if isinstance(arg, (dict, list)) else arg for arg in record.args)

        message = record.getMessage()
        scrubbed = redact_text(message)
        if scrubbed != message:
            record.msg, record.args = scrubbed, None

        if record.exc_info and not record.exc_text:
            record.exc_text = redact_text(_traceback_formatter.formatException(record.exc_info))
        return True


class RequestContextFilter(logging.Filter):
    """Attach request metadata so the formatter can always reference it."""

    def filter(self, record):
        if has_request_context():
            record.request_id = g.get('request_id', '-')
            auth = g.get('auth')
            record.church_id = getattr(auth, 'church_id', None) or '-'
            record.path = request.path
        else:
            record.request_id = '-'
            record.church_id = '-'
            record.path = '-'
        return True


def resolve_log_level(app) -> int:
    """LOG_LEVEL if set, else DEBUG in development and INFO everywhere else."""
    configured = app.config.get('LOG_LEVEL')
    if configured:
        level = logging.getLevelName(str(configured).upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if app.config.get('ENV') == 'development' else logging.INFO


def configure_logging(app):
    """Install the stream handler, filters and level on the root and app loggers."""
    level = resolve_log_level(app)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestContextFilter())
    handler.addFilter(RedactingFilter())
    handler.set_name('faithsite')

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == 'faithsite':
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    app.logger.setLevel(level)
    return handler
