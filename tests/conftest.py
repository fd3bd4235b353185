"""
Shared fixtures: one application on in-memory SQLite, emptied after every test.
"""

import pytest

from faithsite import create_app, database
from faithsite.models import PlatformRole, UserRole
from tests.factories import login, make_church, make_membership, make_user


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestingConfig')
    with app.app_context():
        database.create_all()
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session; every table is emptied after the test."""
    session = database.get_session()
    yield session
    session.rollback()
    for table in reversed(database.Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.remove()


@pytest.fixture(autouse=True)
def reset_rate_limits(app):
    """Rate-limit counters are process-wide; start every test from zero."""
    app.extensions['rate_limiter'].reset()
    yield
    app.extensions['rate_limiter'].reset()


@pytest.fixture(scope='function')
def church1(session):
    """First test church (grace.localhost)."""
    return make_church(session, 'grace')


@pytest.fixture(scope='function')
def church2(session):
    """Second test church for isolation tests (hope.localhost)."""
    return make_church(session, 'hope')


@pytest.fixture(scope='function')
def admin1(session, church1):
    """ADMIN of church1."""
    user = make_user(session, email='admin1@test.com', name='Admin One')
    make_membership(session, user, church1, UserRole.ADMIN.value, is_primary=True)
    return user


@pytest.fixture(scope='function')
def editor1(session, church1):
    """EDITOR of church1."""
    user = make_user(session, email='editor1@test.com', name='Editor One')
    make_membership(session, user, church1, UserRole.EDITOR.value)
    return user


@pytest.fixture(scope='function')
def viewer1(session, church1):
    """VIEWER of church1."""
    user = make_user(session, email='viewer1@test.com', name='Viewer One')
    make_membership(session, user, church1, UserRole.VIEWER.value)
    return user


@pytest.fixture(scope='function')
def admin2(session, church2):
    """ADMIN of church2."""
    user = make_user(session, email='admin2@test.com', name='Admin Two')
    make_membership(session, user, church2, UserRole.ADMIN.value, is_primary=True)
    return user


@pytest.fixture(scope='function')
def platform_admin(session):
    return make_user(session, email='platform@test.com', platform_role=PlatformRole.PLATFORM_ADMIN.value)


@pytest.fixture(scope='function')
def platform_staff(session):
    return make_user(session, email='staff@test.com', platform_role=PlatformRole.PLATFORM_STAFF.value)


@pytest.fixture(scope='function')
def sales_rep(session):
    return make_user(session, email='rep@test.com', platform_role=PlatformRole.SALES_REP.value)


@pytest.fixture(scope='function')
def admin_client(client, session, admin1, church1):
    """Client signed in as church1's ADMIN on the admin surface."""
    login(client, session, admin1, church1)
    return client
