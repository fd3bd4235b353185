"""
Unit tests for log redaction and request-context stamping.
"""

import logging
import sys

import pytest
from sqlalchemy.exc import OperationalError

from faithsite.logging_config import (
    REDACTED, RedactingFilter, RequestContextFilter, describe_error, is_sensitive_key, redact, redact_text,
    resolve_log_level,
)


def _record(msg, args=()):
    return logging.LogRecord('test', logging.INFO, __file__, 1, msg, args, None)


class TestRedaction:
    """Tests for redact()."""

    @pytest.mark.parametrize('key', [
        'password', 'Password', 'passwordHash', 'password_hash', 'token', 'sessionToken',
        'secret', 'client_secret', 'apiKey', 'api_key', 'x-api-key', 'Authorization',
        'cookie', 'jwt', 'accessToken', 'refreshToken', 'creditCard', 'ssn',
    ])
    def test_sensitive_keys(self, key):
        assert is_sensitive_key(key) is True

    @pytest.mark.parametrize('key', ['email', 'name', 'church_id', 'status', 1, None])
    def test_plain_keys(self, key):
        assert is_sensitive_key(key) is False

    def test_nested_structures(self):
        payload = {
            'email': 'a@b.com',
            'password': 'hunter2',
            'nested': {'apiKey': 'k', 'items': [{'token': 't', 'id': 1}]},
            'tuple': ({'secret': 's'},),
        }

        result = redact(payload)

        assert result['email'] == 'a@b.com'
        assert result['password'] == REDACTED
        assert result['nested']['apiKey'] == REDACTED
        assert result['nested']['items'] == [{'token': REDACTED, 'id': 1}]
        assert result['tuple'] == ({'secret': REDACTED},)

    def test_does_not_mutate_input(self):
        payload = {'password': 'hunter2'}

        redact(payload)

        assert payload == {'password': 'hunter2'}

    def test_circular_references(self):
        payload = {'name': 'loop'}
        payload['self'] = payload
        items = [1]
        items.append(items)

        assert redact(payload) == {'name': 'loop', 'self': '[Circular]'}
        assert redact(items) == [1, '[Circular]']

    def test_scalars_pass_through(self):
        assert redact('password') == 'password'
        assert redact(None) is None
        assert redact(42) == 42


class TestLogFilters:

    def test_redacting_filter_dict_args(self):
        record = _record('login %(email)s %(password)s', ({'email': 'a@b.com', 'password': 'x'},))

        assert RedactingFilter().filter(record) is True
        assert record.getMessage() == f'login a@b.com {REDACTED}'

    def test_redacting_filter_positional_args(self):
        record = _record('payload %s for %s', ({'token': 'abc'}, 'grace'))

        RedactingFilter().filter(record)

        assert record.getMessage() == f"payload {{'token': '{REDACTED}'}} for grace"

    def test_context_filter_outside_request(self):
        record = _record('hello')

        RequestContextFilter().filter(record)

        assert (record.request_id, record.church_id, record.path) == ('-', '-', '-')

    def test_context_filter_inside_request(self, app):
        from flask import g

        record = _record('hello')
        with app.test_request_context('/api/health'):
            g.request_id = 'req_1'
            RequestContextFilter().filter(record)

        assert record.request_id == 'req_1'
        assert record.church_id == '-'
        assert record.path == '/api/health'


class TestMessageScrubbing:
    """Secrets already baked into a formatted message are masked too."""

    TOKEN = 'ab' * 32

    def _db_error(self):
        return OperationalError(
            'SELECT * FROM user_session WHERE token = ?', (self.TOKEN,), Exception('database is locked'),
        )

    def test_sql_parameters(self):
        text = redact_text(str(self._db_error()))

        assert self.TOKEN not in text
        assert f'[parameters: {REDACTED}]' in text
        assert 'database is locked' in text

    @pytest.mark.parametrize('text, expected', [
        ('cookie fi_session=abc123; Path=/', f'cookie fi_session={REDACTED}; Path=/'),
        ('retry with token: abc123', f'retry with token: {REDACTED}'),
        ("{'password': 'hunter2'}", f"{{'password': '{REDACTED}'}}"),
        ('Login failed for a@b.com', 'Login failed for a@b.com'),
    ])
    def test_key_value_secrets(self, text, expected):
        assert redact_text(text) == expected

    def test_describe_error(self):
        described = describe_error(self._db_error())

        assert described.startswith('OperationalError: ')
        assert self.TOKEN not in described

    def test_filter_scrubs_preformatted_message(self):
        record = _record(f'Error loading request context: {self._db_error()}')

        RedactingFilter().filter(record)

        assert self.TOKEN not in record.getMessage()

    def test_filter_scrubs_traceback(self):
        try:
            raise self._db_error()
        except OperationalError:
            record = logging.LogRecord('test', logging.ERROR, __file__, 1, 'boom', (), sys.exc_info())

        RedactingFilter().filter(record)

        assert 'OperationalError' in record.exc_text
        assert self.TOKEN not in record.exc_text


class TestResolveLogLevel:

    @pytest.mark.parametrize('config, expected', [
        ({'LOG_LEVEL': 'warning'}, logging.WARNING),
        ({'LOG_LEVEL': None, 'ENV': 'development'}, logging.DEBUG),
        ({'LOG_LEVEL': None, 'ENV': 'production'}, logging.INFO),
        ({'LOG_LEVEL': 'bogus', 'ENV': 'production'}, logging.INFO),
    ])
    def test_levels(self, mocker, config, expected):
        assert resolve_log_level(mocker.Mock(config=config)) == expected
