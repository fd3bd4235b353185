"""
Integration tests for page entry points.
"""

from tests.factories import (
    ADMIN_URL, MARKETING_URL, PLATFORM_HOST, PLATFORM_URL, login, make_membership, make_user,
)


class TestPageRedirects:
    """Signed-out visitors are sent to the login page with a return path."""

    def test_dashboard_redirects_to_login(self, client):
        response = client.get('/admin/dashboard?tab=news', base_url=ADMIN_URL)

        assert response.status_code == 302
        assert response.headers['Location'] == '/login?returnTo=%2Fadmin%2Fdashboard%3Ftab%3Dnews'

    def test_platform_redirects_to_login(self, client):
        response = client.get('/platform', base_url=PLATFORM_URL)

        assert response.status_code == 302
        assert response.headers['Location'].startswith('/login?returnTo=%2Fplatform')

    def test_login_url_is_configurable(self, app, client, mocker):
        mocker.patch.dict(app.config, {'LOGIN_URL': '/signin'})

        response = client.get('/admin/dashboard', base_url=ADMIN_URL)

        assert response.headers['Location'].startswith('/signin?returnTo=')

    def test_pages_only_exist_on_their_surface(self, client):
        assert client.get('/admin/dashboard', base_url=MARKETING_URL).status_code == 404
        assert client.get('/platform', base_url=ADMIN_URL).status_code == 404


class TestSignedInPages:

    def test_dashboard(self, admin_client, admin1):
        response = admin_client.get('/admin/dashboard', base_url=ADMIN_URL)

        assert response.status_code == 200
        assert response.get_json()['user']['user_id'] == admin1.id

    def test_dashboard_sends_multi_church_user_to_selection(self, client, session, church1, church2):
        user = make_user(session)
        make_membership(session, user, church1)
        make_membership(session, user, church2)
        login(client, session, user, None)

        response = client.get('/admin/dashboard', base_url=ADMIN_URL)

        assert response.get_json() == {'status': 'redirect', 'redirect_to': '/select-church'}

    def test_select_church_switch_url(self, admin_client):
        response = admin_client.get('/select-church', base_url=ADMIN_URL)

        assert response.get_json()['switch_url'] == 'http://admin.localhost:5000/api/auth/switch-church'

    def test_platform_home(self, client, session, platform_admin):
        login(client, session, platform_admin, host=PLATFORM_HOST)

        response = client.get('/platform', base_url=PLATFORM_URL)

        assert response.status_code == 200
        assert response.get_json()['user']['platform_role'] == 'PLATFORM_ADMIN'

    def test_platform_home_needs_platform_role(self, client, session, admin1, church1, sales_rep):
        login(client, session, admin1, church1, host=PLATFORM_HOST)

        assert client.get('/platform', base_url=PLATFORM_URL).status_code == 403

        login(client, session, sales_rep, host=PLATFORM_HOST)

        assert client.get('/platform', base_url=PLATFORM_URL).status_code == 200

