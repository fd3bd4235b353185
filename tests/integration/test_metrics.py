"""
Integration tests for the /metrics endpoint and policy-layer rejection counters.
"""

import pytest

from faithsite.blueprints.metrics import record_rejection, registry
from tests.factories import ADMIN_URL, MARKETING_URL, login

CONSULTATION = {'name': 'Pastor Ann', 'email': 'ann@church.org', 'church_name': 'Riverside'}


def _sample(name, **labels):
    """Current counter value; counters are process-wide so tests compare deltas."""
    return registry.get_sample_value(name, labels) or 0.0


class TestMetricsEndpoint:

    def test_exposes_request_counters(self, client):
        client.get('/api/health', base_url=ADMIN_URL)

        response = client.get('/metrics', base_url=ADMIN_URL)

        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert 'http_requests_total' in body
        assert 'surface="admin"' in body


class TestRejectionCounters:
    """401/403/429 answers from the policy layer are counted."""

    def test_unauthenticated(self, client):
        before = _sample('auth_rejections_total', status='401')

        assert client.get('/api/auth/me', base_url=ADMIN_URL).status_code == 401

        assert _sample('auth_rejections_total', status='401') == before + 1
        body = client.get('/metrics', base_url=ADMIN_URL).get_data(as_text=True)
        assert 'auth_rejections_total{status="401"}' in body

    def test_forbidden(self, client, session, editor1, church1):
        login(client, session, editor1, church1)
        before = _sample('auth_rejections_total', status='403')

        response = client.post('/api/team', json={'email': 'x@test.com', 'role': 'VIEWER'}, base_url=ADMIN_URL)

        assert response.status_code == 403
        assert _sample('auth_rejections_total', status='403') == before + 1

    def test_rate_limited(self, client, session):
        route = '/api/marketing/consultation'
        before = _sample('rate_limit_rejections_total', route=route)

        statuses = [client.post(route, json=CONSULTATION, base_url=MARKETING_URL).status_code for _ in range(7)]

        assert statuses == [201] * 5 + [429] * 2
        assert _sample('rate_limit_rejections_total', route=route) == before + 2

    @pytest.mark.parametrize('status_code', [200, 400, 404, 500])
    def test_other_statuses_ignored(self, status_code):
        before_auth = {status: _sample('auth_rejections_total', status=status) for status in ('401', '403')}
        before_rate = _sample('rate_limit_rejections_total', route='unknown')

        record_rejection(status_code, None)

        assert {status: _sample('auth_rejections_total', status=status) for status in ('401', '403')} == before_auth
        assert _sample('rate_limit_rejections_total', route='unknown') == before_rate
        assert _sample('auth_rejections_total', status=str(status_code)) == 0.0

    def test_rate_limit_without_route(self):
        before = _sample('rate_limit_rejections_total', route='unknown')

        record_rejection(429)

        assert _sample('rate_limit_rejections_total', route='unknown') == before + 1
