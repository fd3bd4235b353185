"""
Integration tests for the announcements API: permissions, tenant isolation and surfaces.
"""

import pytest

from faithsite.models import Announcement, AuditAction, AuditLog, ContentStatus
from faithsite.tenant_session import get_tenant_session
from tests.factories import (
    ADMIN_URL, MARKETING_URL, PLATFORM_URL, login, make_membership, make_user, tenant_url,
)


def _create(session, church, title='Potluck', status=ContentStatus.DRAFT.value):
    db = get_tenant_session(church.id, session)
    announcement = db.add(Announcement(title=title, body='Bring a dish', status=status))
    db.commit()
    return announcement


class TestAnnouncementCrud:
    """Test the happy paths for an ADMIN."""

    def test_create(self, admin_client, session, church1):
        response = admin_client.post('/api/announcements', json={
            'title': '  Easter Service  ',
            'body': 'Sunrise at 6am',
            'expires_at': '2030-04-20T09:00:00',
        }, base_url=ADMIN_URL)

        assert response.status_code == 201
        data = response.get_json()['announcement']
        assert data['title'] == 'Easter Service'
        assert data['status'] == 'DRAFT'
        assert data['expires_at'] == '2030-04-20T09:00:00'

        row = session.get(Announcement, data['id'])
        assert row.church_id == church1.id
        assert session.query(AuditLog).filter(
            AuditLog.action == AuditAction.CONTENT_CREATED.value
        ).count() == 1

    def test_create_ignores_church_id_in_body(self, admin_client, session, church1, church2):
        """Test a client-supplied church_id cannot place content in another church."""
        response = admin_client.post('/api/announcements', json={
            'title': 'Sneaky', 'church_id': church2.id,
        }, base_url=ADMIN_URL)

        assert response.status_code == 201
        row = session.get(Announcement, response.get_json()['announcement']['id'])
        assert row.church_id == church1.id

    def test_create_validation(self, admin_client):
        response = admin_client.post('/api/announcements', json={'title': 'x' * 201}, base_url=ADMIN_URL)

        assert response.status_code == 400
        assert 'title' in response.get_json()['errors']

    def test_list_and_filter(self, admin_client, session, church1):
        _create(session, church1, 'Draft one')
        _create(session, church1, 'Live one', ContentStatus.PUBLISHED.value)

        all_items = admin_client.get('/api/announcements', base_url=ADMIN_URL).get_json()['announcements']
        published = admin_client.get(
            '/api/announcements?status=published', base_url=ADMIN_URL
        ).get_json()['announcements']

        assert {a['title'] for a in all_items} == {'Draft one', 'Live one'}
        assert [a['title'] for a in published] == ['Live one']

    def test_update(self, admin_client, session, church1):
        announcement = _create(session, church1)

        response = admin_client.put(f'/api/announcements/{announcement.id}', json={
            'title': 'Potluck moved', 'body': 'Now on Saturday',
        }, base_url=ADMIN_URL)

        assert response.status_code == 200
        assert response.get_json()['announcement']['title'] == 'Potluck moved'

    def test_publish_and_unpublish(self, admin_client, session, church1):
        announcement = _create(session, church1)
        url = f'/api/announcements/{announcement.id}'

        published = admin_client.patch(url, json={'action': 'publish'}, base_url=ADMIN_URL).get_json()
        assert published['announcement']['status'] == 'PUBLISHED'
        assert published['announcement']['published_at'] is not None

        drafted = admin_client.patch(url, json={'action': 'unpublish'}, base_url=ADMIN_URL).get_json()
        assert drafted['announcement']['status'] == 'DRAFT'

        bad = admin_client.patch(url, json={'action': 'archive'}, base_url=ADMIN_URL)
        assert bad.status_code == 400

    def test_delete(self, admin_client, session, church1):
        announcement = _create(session, church1)

        response = admin_client.delete(f'/api/announcements/{announcement.id}', base_url=ADMIN_URL)

        assert response.status_code == 200
        assert get_tenant_session(church1.id, session).count(Announcement) == 0


class TestAnnouncementPermissions:
    """Test role enforcement."""

    def test_viewer_can_read_but_not_write(self, client, session, viewer1, church1):
        announcement = _create(session, church1)
        login(client, session, viewer1, church1)

        assert client.get('/api/announcements', base_url=ADMIN_URL).status_code == 200
        assert client.post('/api/announcements', json={'title': 'x'}, base_url=ADMIN_URL).status_code == 403
        assert client.put(
            f'/api/announcements/{announcement.id}', json={'title': 'x'}, base_url=ADMIN_URL
        ).status_code == 403
        assert client.patch(
            f'/api/announcements/{announcement.id}', json={'action': 'publish'}, base_url=ADMIN_URL
        ).status_code == 403
        assert client.delete(f'/api/announcements/{announcement.id}', base_url=ADMIN_URL).status_code == 403

    def test_editor_can_publish_and_delete(self, client, session, editor1, church1):
        announcement = _create(session, church1)
        login(client, session, editor1, church1)

        assert client.patch(
            f'/api/announcements/{announcement.id}', json={'action': 'publish'}, base_url=ADMIN_URL
        ).status_code == 200
        assert client.delete(f'/api/announcements/{announcement.id}', base_url=ADMIN_URL).status_code == 200

    def test_unauthenticated(self, client):
        response = client.get('/api/announcements', base_url=ADMIN_URL)

        assert response.status_code == 401

    def test_no_church_selected(self, client, session, church1, church2):
        user = make_user(session)
        make_membership(session, user, church1)
        make_membership(session, user, church2)
        login(client, session, user, None)

        response = client.get('/api/announcements', base_url=ADMIN_URL)

        assert response.status_code == 403
        assert response.get_json()['message'] == 'Select a church first'


class TestAnnouncementIsolation:
    """Test another church's announcements are indistinguishable from missing ones."""

    @pytest.mark.parametrize('method, body', [
        ('get', None),
        ('put', {'title': 'Hijacked'}),
        ('patch', {'action': 'publish'}),
        ('delete', None),
    ])
    def test_foreign_equals_missing(self, admin_client, session, church2, method, body):
        foreign = _create(session, church2, 'Hope only')
        call = getattr(admin_client, method)

        foreign_response = call(f'/api/announcements/{foreign.id}', json=body, base_url=ADMIN_URL)
        missing_response = call(f'/api/announcements/{"f" * 32}', json=body, base_url=ADMIN_URL)

        assert foreign_response.status_code == missing_response.status_code == 404
        assert foreign_response.get_json() == missing_response.get_json()

        session.expire_all()
        row = session.get(Announcement, foreign.id)
        assert row.title == 'Hope only'
        assert row.status == ContentStatus.DRAFT.value

    def test_list_only_shows_own_church(self, admin_client, session, church1, church2):
        _create(session, church1, 'Grace news')
        _create(session, church2, 'Hope news')

        items = admin_client.get('/api/announcements', base_url=ADMIN_URL).get_json()['announcements']

        assert [a['title'] for a in items] == ['Grace news']


class TestAnnouncementSurfaces:
    """The API only exists on the admin surface."""

    @pytest.mark.parametrize('base_url', [MARKETING_URL, PLATFORM_URL, tenant_url('grace')])
    def test_not_found_elsewhere(self, admin_client, base_url):
        response = admin_client.get('/api/announcements', base_url=base_url)

        assert response.status_code == 404
