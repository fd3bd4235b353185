"""
Row builders and sign-in helper shared by the test suite.
"""

import uuid

from faithsite.models import Church, ChurchMembership, ChurchStatus, User, UserRole
from faithsite.services import session_service
from faithsite.utils.cookies import SESSION_COOKIE_NAME

ADMIN_HOST = 'admin.localhost'
PLATFORM_HOST = 'platform.localhost'
MARKETING_HOST = 'localhost'

ADMIN_URL = f'http://{ADMIN_HOST}'
PLATFORM_URL = f'http://{PLATFORM_HOST}'
MARKETING_URL = f'http://{MARKETING_HOST}'

PASSWORD = 'password123'


def tenant_url(slug):
    return f'http://{slug}.localhost'


def make_church(session, slug, status=ChurchStatus.ACTIVE.value, **kwargs):
    church = Church(
        slug=slug,
        name=kwargs.pop('name', f'{slug.title()} Church'),
        status=status,
        **kwargs
    )
    session.add(church)
    session.commit()
    return church


def make_user(session, email=None, password=PASSWORD, platform_role=None, is_active=True, name=None):
    suffix = str(uuid.uuid4())[:8]
    user = User(
        email=email or f'user-{suffix}@test.com',
        name=name or f'User {suffix}',
        platform_role=platform_role,
        is_active=is_active,
    )
    user.set_password(password)
    session.add(user)
    session.commit()
    return user


def make_membership(session, user, church, role=UserRole.ADMIN.value, is_primary=False, is_active=True):
    membership = ChurchMembership(
        user_id=user.id,
        church_id=church.id,
        role=role,
        is_primary=is_primary,
        is_active=is_active,
    )
    session.add(membership)
    session.commit()
    return membership


def login(client, session, user, church=None, host=ADMIN_HOST):
    """Create a server-side session for ``user`` and hand ``client`` its cookie on ``host``."""
    token = session_service.create_session(session, user.id, church.id if church else None)
    session.commit()
    client.set_cookie(SESSION_COOKIE_NAME, token, domain=host)
    return token
